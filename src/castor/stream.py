"""Incremental decoding of server-sent-event bodies into response frames.

The wire format is a subset of SSE: only ``data: <json>`` lines matter,
frames are blank-line separated, and an optional ``data: [DONE]`` sentinel
ends the stream (EOF alone is also a valid terminator).
"""

from __future__ import annotations

import codecs
from dataclasses import dataclass
import json
import logging
from typing import Any

from castor.types import StreamFrame

log = logging.getLogger(__name__)

DATA_PREFIX = "data: "
DONE_SENTINEL = "[DONE]"


class FrameDecoder:
    """Buffering state machine turning body chunks into decoded frames.

    Chunks may split a line (or a multi-byte character) anywhere; the
    incomplete tail is carried over to the next :meth:`feed`. Call
    :meth:`flush` exactly once after the body ends, since the last frame may
    lack a trailing newline.

    Example:
        decoder = FrameDecoder()
        frames = []
        async for chunk in response.aiter_bytes():
            frames.extend(decoder.feed(chunk))
        frames.extend(decoder.flush())
    """

    def __init__(self) -> None:
        self._buffer = ""
        self._decoder = codecs.getincrementaldecoder("utf-8")(errors="replace")
        self._flushed = False

    def feed(self, chunk: bytes | str) -> list[dict[str, Any]]:
        """Ingest one chunk and return the frames it completed."""
        if self._flushed:
            raise RuntimeError("FrameDecoder.feed() called after flush()")

        if isinstance(chunk, bytes):
            self._buffer += self._decoder.decode(chunk)
        else:
            self._buffer += chunk

        *lines, self._buffer = self._buffer.split("\n")
        return self._parse_lines(lines)

    def flush(self) -> list[dict[str, Any]]:
        """Drain whatever remains in the buffer once the body has ended."""
        if self._flushed:
            return []
        self._flushed = True

        self._buffer += self._decoder.decode(b"", final=True)
        remainder, self._buffer = self._buffer, ""
        if not remainder:
            return []
        return self._parse_lines(remainder.split("\n"))

    @property
    def pending(self) -> str:
        """Text held back waiting for its line to complete."""
        return self._buffer

    def _parse_lines(self, lines: list[str]) -> list[dict[str, Any]]:
        frames: list[dict[str, Any]] = []
        for line in lines:
            frame = parse_data_line(line)
            if frame is not None:
                frames.append(frame)
        return frames


def parse_data_line(line: str) -> dict[str, Any] | None:
    """Decode one complete SSE line into a frame payload.

    Returns None for non-data lines, empty payloads, the ``[DONE]`` sentinel,
    and malformed JSON. A bad line is dropped on its own; it never aborts the
    stream.
    """
    line = line.removesuffix("\r")
    if not line.startswith(DATA_PREFIX):
        return None

    payload = line[len(DATA_PREFIX) :].strip()
    if not payload or payload == DONE_SENTINEL:
        return None

    try:
        frame = json.loads(payload)
    except ValueError:
        log.debug("Dropping malformed stream line (%d chars)", len(payload))
        return None

    if not isinstance(frame, dict):
        log.debug("Dropping non-object stream payload of type %s", type(frame).__name__)
        return None
    return frame


@dataclass(frozen=True)
class ContentDelta:
    """Visible answer text and reasoning text carried by one frame."""

    text: str = ""
    thought: str = ""

    def __bool__(self) -> bool:
        return bool(self.text or self.thought)


def _first_candidate_parts(frame: StreamFrame) -> list[Any]:
    if not frame.candidates:
        return []
    content = frame.candidates[0].content
    if content is None or not content.parts:
        return []
    return content.parts


def extract_content(frame: dict[str, Any] | StreamFrame) -> ContentDelta:
    """Split the first candidate's parts into visible text and reasoning.

    Parts flagged ``thought: true`` go to ``thought``; every other
    text-bearing part goes to ``text``. Both are plain concatenations.

    Raises:
        pydantic.ValidationError: If *frame* does not have the frame shape.
    """
    parsed = frame if isinstance(frame, StreamFrame) else StreamFrame.parse(frame)

    text: list[str] = []
    thought: list[str] = []
    for part in _first_candidate_parts(parsed):
        if part.text is None:
            continue
        if part.thought is True:
            thought.append(part.text)
        else:
            text.append(part.text)
    return ContentDelta(text="".join(text), thought="".join(thought))


def extract_text(frame: dict[str, Any] | StreamFrame) -> str:
    """Concatenate every text part of the first candidate, reasoning included."""
    parsed = frame if isinstance(frame, StreamFrame) else StreamFrame.parse(frame)
    return "".join(
        part.text for part in _first_candidate_parts(parsed) if part.text is not None
    )


def usage_from_frame(frame: dict[str, Any] | StreamFrame) -> dict[str, int]:
    """Map ``usageMetadata`` onto provider-agnostic token counts.

    Returns an empty dict when the frame carries no usage.
    """
    parsed = frame if isinstance(frame, StreamFrame) else StreamFrame.parse(frame)
    um = parsed.usage_metadata
    if um is None:
        return {}

    usage = {
        "input_tokens": um.prompt_token_count or 0,
        "output_tokens": um.candidates_token_count or 0,
        "total_tokens": um.total_token_count or 0,
    }
    if um.thoughts_token_count is not None:
        usage["reasoning_tokens"] = um.thoughts_token_count
    return usage
