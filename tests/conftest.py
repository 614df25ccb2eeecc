"""Pytest configuration and fixtures.

Provides environment isolation, logging configuration, marker handling, and a
fake service built on ``httpx.MockTransport``. Fixtures here are autouse
unless noted.
"""

from __future__ import annotations

from collections.abc import AsyncIterator, Callable, Iterable
from contextlib import suppress
from dataclasses import dataclass, field
import json
import logging
import os
from typing import Any

import httpx
import pytest

from castor.config import ApiConfig

TEST_MODEL = "gemini-2.5-flash"
TEST_ENDPOINT = "https://example.test/v1beta"
TEST_API_KEY = "test-key"

# =============================================================================
# Wire Helpers
# =============================================================================


def text_frame(*parts: dict[str, Any], **extra: Any) -> dict[str, Any]:
    """Build a response frame whose first candidate carries *parts*."""
    return {"candidates": [{"content": {"role": "model", "parts": list(parts)}}], **extra}


def sse_body(frames: Iterable[dict[str, Any]], *, done: bool = True) -> bytes:
    """Serialize frames the way the service streams them."""
    lines = [f"data: {json.dumps(frame)}\n\n" for frame in frames]
    if done:
        lines.append("data: [DONE]\n\n")
    return "".join(lines).encode("utf-8")


def split_every(data: bytes, size: int) -> list[bytes]:
    return [data[i : i + size] for i in range(0, len(data), size)]


async def _iter_chunks(chunks: list[bytes]) -> AsyncIterator[bytes]:
    for chunk in chunks:
        yield chunk


def streaming_response(chunks: list[bytes], status_code: int = 200) -> httpx.Response:
    """A response whose body arrives in exactly the given chunks."""
    return httpx.Response(status_code, content=_iter_chunks(chunks))


# =============================================================================
# Test Doubles
# =============================================================================


@dataclass
class FakeService:
    """Service test double for driver behavior verification.

    Captures every request and answers with the configured responder.
    """

    responder: Callable[[httpx.Request], httpx.Response]
    requests: list[httpx.Request] = field(default_factory=list)

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return self.responder(request)

    @property
    def last_request(self) -> httpx.Request:
        return self.requests[-1]

    @property
    def last_body(self) -> dict[str, Any]:
        return json.loads(self.last_request.content)

    def client(self) -> httpx.AsyncClient:
        return httpx.AsyncClient(transport=httpx.MockTransport(self.handle))


@pytest.fixture
def api_config() -> ApiConfig:
    """A valid config pointing at the fake service (not autouse)."""
    return ApiConfig(model=TEST_MODEL, api_key=TEST_API_KEY, endpoint=TEST_ENDPOINT)


# =============================================================================
# Environment Isolation (Autouse)
# =============================================================================


@pytest.fixture(autouse=True)
def block_dotenv(request, monkeypatch):
    """Prevent python-dotenv from loading project .env files during tests.

    Opt-out: @pytest.mark.allow_dotenv
    """
    if request.node.get_closest_marker("allow_dotenv"):
        return
    with suppress(Exception):
        monkeypatch.setattr(
            "dotenv.load_dotenv", lambda *_args, **_kwargs: False, raising=False
        )


@pytest.fixture(autouse=True)
def isolate_provider_env(request, monkeypatch):
    """Ensure a clean provider environment for each test.

    Clears GEMINI_* env vars to prevent test pollution.
    Opt-out: @pytest.mark.allow_env_pollution or @pytest.mark.api
    """
    if request.node.get_closest_marker("allow_env_pollution") or (
        "api" in request.node.keywords
    ):
        return

    for key in list(os.environ.keys()):
        if key.startswith("GEMINI_"):
            monkeypatch.delenv(key, raising=False)


# =============================================================================
# Logging
# =============================================================================


@pytest.fixture(scope="session", autouse=True)
def quiet_noisy_libraries():
    """Suppress noisy third-party loggers."""
    logging.getLogger("httpx").setLevel(logging.WARNING)
    logging.getLogger("httpcore").setLevel(logging.WARNING)


# =============================================================================
# Pytest Hooks
# =============================================================================

API_TESTS_REASON = "API tests require ENABLE_API_TESTS=1"


def _api_tests_enabled() -> bool:
    return bool(os.getenv("ENABLE_API_TESTS"))


def pytest_collection_modifyitems(items):
    """Automatically skip API tests when not explicitly enabled."""
    if _api_tests_enabled():
        return
    skip_api = pytest.mark.skip(reason=API_TESTS_REASON)
    for item in items:
        if "api" in item.keywords:
            item.add_marker(skip_api)


@pytest.fixture
def gemini_api_key():
    """Return GEMINI_API_KEY or skip the test if unavailable."""
    key = os.getenv("GEMINI_API_KEY")
    if not key:
        pytest.skip("GEMINI_API_KEY not set")
    return key
