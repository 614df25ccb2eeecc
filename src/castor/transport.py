"""Streaming and non-streaming call paths, plus the connectivity probe.

Every entry point shares one pre-flight: validate the endpoint, reject a blank
key, then build the URL and body. Failures leave as a classified
:class:`~castor.errors.DriverError`; an error that is already classified is
never re-wrapped.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator, Callable, Sequence
from contextlib import aclosing, asynccontextmanager
from dataclasses import dataclass, field
import logging
from typing import TYPE_CHECKING, Any

import httpx

from castor._errors import classify_exception, classify_status
from castor._http import JSON_HEADERS
from castor.capabilities import default_capabilities
from castor.endpoint import build_request_url, redact_url, validate_endpoint
from castor.errors import DriverError, validation_error
from castor.options import GenerationConfig
from castor.request import build_request_body
from castor.stream import FrameDecoder, extract_content, extract_text, usage_from_frame
from castor.types import StreamFrame

if TYPE_CHECKING:
    from castor.capabilities import CapabilityResolver
    from castor.config import ApiConfig
    from castor.options import ModelAdvancedConfig, SafetySetting
    from castor.types import ConversationTurn

log = logging.getLogger(__name__)

OnChunk = Callable[[str], object]

_PROBE_PROMPT = "Hi"
_PROBE_MAX_OUTPUT_TOKENS = 1


@dataclass(frozen=True)
class StreamDelta:
    """One increment pulled from a streaming call.

    ``text`` and ``thought`` hold only what this frame added, never the
    running total. ``usage`` is set on frames that report token counts.
    """

    text: str = ""
    thought: str = ""
    usage: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ChatResult:
    """Outcome of :func:`send_message_with_thoughts`."""

    text: str
    #: Accumulated reasoning trace; None when the model sent none.
    thought_summary: str | None = None
    #: Last token counts reported by the stream, if any.
    usage: dict[str, int] = field(default_factory=dict)


@dataclass(frozen=True)
class ConnectionResult:
    """Outcome of :func:`test_connection`."""

    success: bool
    error: str | None = None


def _prepare(
    config: ApiConfig,
    *,
    stream: bool,
    contents: Sequence[ConversationTurn],
    generation_config: GenerationConfig | None,
    safety_settings: Sequence[SafetySetting] | None,
    system_instruction: str | None,
    advanced: ModelAdvancedConfig | None,
    model_id: str | None,
    resolver: CapabilityResolver,
) -> tuple[str, dict[str, Any]]:
    """Run the shared pre-flight and return ``(url, body)``."""
    validation = validate_endpoint(config.endpoint)
    if not validation.valid:
        raise validation_error(
            validation.error or "Invalid API endpoint",
            hint="Pass an http(s) base URL such as ApiConfig(endpoint='https://...').",
        )
    if not config.api_key or not config.api_key.strip():
        raise validation_error(
            "API key must not be empty",
            hint="Set GEMINI_API_KEY or pass ApiConfig(api_key=...).",
        )

    url = build_request_url(config, stream=stream)
    body = build_request_body(
        contents,
        generation_config,
        safety_settings,
        system_instruction,
        advanced,
        model_id,
        resolver,
    )
    return url, body


@asynccontextmanager
async def _client_scope(client: httpx.AsyncClient | None) -> AsyncIterator[httpx.AsyncClient]:
    """Yield the caller's client, or a per-call client closed on exit."""
    if client is not None:
        yield client
        return

    # No timeout: a hung connection blocks until the transport gives up.
    owned = httpx.AsyncClient(timeout=None)
    try:
        yield owned
    finally:
        try:
            await owned.aclose()
        except asyncio.CancelledError:
            raise
        except Exception as exc:
            # Cleanup should never mask the primary failure.
            log.warning("HTTP client cleanup failed: %s", exc)


async def _raise_for_status(response: httpx.Response) -> None:
    if response.is_success:
        return
    await response.aread()
    error = classify_status(response.status_code, response.text)
    log.debug("Request failed with status %d (%s)", response.status_code, error.kind)
    raise error


async def _iter_frames(
    url: str,
    body: dict[str, Any],
    client: httpx.AsyncClient | None,
) -> AsyncIterator[dict[str, Any]]:
    """POST *body* and yield decoded frames in stream order.

    One read is outstanding at a time; the next chunk is requested only after
    the consumer has taken every frame from the previous one.
    """
    log.debug("POST %s (streaming)", redact_url(url))
    async with _client_scope(client) as http:
        async with http.stream("POST", url, json=body, headers=JSON_HEADERS) as response:
            await _raise_for_status(response)
            decoder = FrameDecoder()
            async for chunk in response.aiter_bytes():
                for frame in decoder.feed(chunk):
                    yield frame
            for frame in decoder.flush():
                yield frame


async def stream_content(
    contents: Sequence[ConversationTurn],
    config: ApiConfig,
    generation_config: GenerationConfig | None = None,
    safety_settings: Sequence[SafetySetting] | None = None,
    system_instruction: str | None = None,
    advanced: ModelAdvancedConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    resolver: CapabilityResolver = default_capabilities,
) -> AsyncIterator[StreamDelta]:
    """Stream a reply as a pull-based sequence of deltas.

    Visible text and reasoning arrive separately on each :class:`StreamDelta`,
    in exact stream order. Stopping early cancels the call: leave the loop and
    close the iterator (``contextlib.aclosing`` does both).

    Example:
        async with aclosing(stream_content(turns, config)) as deltas:
            async for delta in deltas:
                print(delta.text, end="")

    Raises:
        DriverError: On validation, HTTP, network or payload failures.
    """
    url, body = _prepare(
        config,
        stream=True,
        contents=contents,
        generation_config=generation_config,
        safety_settings=safety_settings,
        system_instruction=system_instruction,
        advanced=advanced,
        model_id=config.model,
        resolver=resolver,
    )

    try:
        async with aclosing(_iter_frames(url, body, client)) as frames:
            async for raw in frames:
                frame = StreamFrame.parse(raw)
                content = extract_content(frame)
                usage = usage_from_frame(frame)
                if content or usage:
                    yield StreamDelta(text=content.text, thought=content.thought, usage=usage)
    except asyncio.CancelledError:
        raise
    except DriverError:
        raise
    except Exception as exc:
        raise classify_exception(exc) from exc


async def send_message_with_thoughts(
    contents: Sequence[ConversationTurn],
    config: ApiConfig,
    generation_config: GenerationConfig | None = None,
    safety_settings: Sequence[SafetySetting] | None = None,
    system_instruction: str | None = None,
    on_chunk: OnChunk | None = None,
    advanced: ModelAdvancedConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    resolver: CapabilityResolver = default_capabilities,
) -> ChatResult:
    """Stream a reply, keeping the reasoning trace apart from the answer.

    *on_chunk* receives each visible-text increment (not the running total)
    synchronously, in stream order; reasoning is only accumulated. The
    request's ``thinkingConfig`` follows the model's capabilities.

    Returns:
        ChatResult with the full text and, when present, the reasoning trace.

    Raises:
        DriverError: On validation, HTTP, network or payload failures.
    """
    text: list[str] = []
    thought: list[str] = []
    usage: dict[str, int] = {}

    deltas = stream_content(
        contents,
        config,
        generation_config,
        safety_settings,
        system_instruction,
        advanced,
        client=client,
        resolver=resolver,
    )
    try:
        async with aclosing(deltas):
            async for delta in deltas:
                if delta.text:
                    text.append(delta.text)
                    if on_chunk is not None:
                        on_chunk(delta.text)
                if delta.thought:
                    thought.append(delta.thought)
                if delta.usage:
                    usage = delta.usage
    except asyncio.CancelledError:
        raise
    except DriverError:
        raise
    except Exception as exc:
        raise classify_exception(exc) from exc

    return ChatResult(
        text="".join(text),
        thought_summary="".join(thought) or None,
        usage=usage,
    )


async def send_message(
    contents: Sequence[ConversationTurn],
    config: ApiConfig,
    generation_config: GenerationConfig | None = None,
    safety_settings: Sequence[SafetySetting] | None = None,
    system_instruction: str | None = None,
    on_chunk: OnChunk | None = None,
    advanced: ModelAdvancedConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
) -> str:
    """Stream a reply as plain text, without separating reasoning.

    Every text part is treated as answer text. The body is built without a
    model id, so only the deprecated level-only reasoning path applies; prefer
    :func:`send_message_with_thoughts` for capability-aware requests.

    Raises:
        DriverError: On validation, HTTP, network or payload failures.
    """
    url, body = _prepare(
        config,
        stream=True,
        contents=contents,
        generation_config=generation_config,
        safety_settings=safety_settings,
        system_instruction=system_instruction,
        advanced=advanced,
        model_id=None,
        resolver=default_capabilities,
    )

    text: list[str] = []
    try:
        async with aclosing(_iter_frames(url, body, client)) as frames:
            async for raw in frames:
                increment = extract_text(raw)
                if increment:
                    text.append(increment)
                    if on_chunk is not None:
                        on_chunk(increment)
    except asyncio.CancelledError:
        raise
    except DriverError:
        raise
    except Exception as exc:
        raise classify_exception(exc) from exc
    return "".join(text)


async def generate_content(
    contents: Sequence[ConversationTurn],
    config: ApiConfig,
    generation_config: GenerationConfig | None = None,
    safety_settings: Sequence[SafetySetting] | None = None,
    system_instruction: str | None = None,
    advanced: ModelAdvancedConfig | None = None,
    *,
    client: httpx.AsyncClient | None = None,
    resolver: CapabilityResolver = default_capabilities,
) -> str:
    """Request a complete reply in one response.

    Returns:
        The first candidate's text parts concatenated; ``""`` when the
        response has no candidates.

    Raises:
        DriverError: On validation, HTTP, network or payload failures.
    """
    url, body = _prepare(
        config,
        stream=False,
        contents=contents,
        generation_config=generation_config,
        safety_settings=safety_settings,
        system_instruction=system_instruction,
        advanced=advanced,
        model_id=config.model,
        resolver=resolver,
    )
    return await _post_for_text(url, body, client)


async def _post_for_text(
    url: str,
    body: dict[str, Any],
    client: httpx.AsyncClient | None,
) -> str:
    """POST *body* and return the first candidate's text."""
    log.debug("POST %s", redact_url(url))
    try:
        async with _client_scope(client) as http:
            response = await http.post(url, json=body, headers=JSON_HEADERS)
            await _raise_for_status(response)
            frame = StreamFrame.parse(response.json())
    except asyncio.CancelledError:
        raise
    except DriverError:
        raise
    except Exception as exc:
        raise classify_exception(exc) from exc
    return extract_text(frame)


async def test_connection(
    config: ApiConfig,
    *,
    client: httpx.AsyncClient | None = None,
) -> ConnectionResult:
    """Probe the service with a minimal one-token request.

    The only entry point that never raises: every failure is reported as
    ``ConnectionResult(success=False, error=...)``. The body carries only the
    prompt and the token cap; no reasoning controls are sent.
    """
    contents: list[ConversationTurn] = [
        {"role": "user", "parts": [{"text": _PROBE_PROMPT}]}
    ]
    try:
        url, body = _prepare(
            config,
            stream=False,
            contents=contents,
            generation_config=GenerationConfig(
                max_output_tokens=_PROBE_MAX_OUTPUT_TOKENS
            ),
            safety_settings=None,
            system_instruction=None,
            advanced=None,
            model_id=None,
            resolver=default_capabilities,
        )
        await _post_for_text(url, body, client)
    except asyncio.CancelledError:
        raise
    except DriverError as exc:
        return ConnectionResult(success=False, error=exc.message)
    except Exception as exc:
        return ConnectionResult(success=False, error=classify_exception(exc).message)
    return ConnectionResult(success=True)


# Not a pytest test despite the name.
test_connection.__test__ = False  # type: ignore[attr-defined]
