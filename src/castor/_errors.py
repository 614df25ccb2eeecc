"""Map HTTP statuses and transport failures onto the closed error taxonomy.

The classifier owns the user-facing wording; callers display
``DriverError.message`` as-is.
"""

from __future__ import annotations

import asyncio
import json
import logging
from typing import Any

import httpx

from castor._http import (
    RATE_LIMITED_STATUS_CODE,
    SERVER_ERROR_STATUS_CODES,
    UNAUTHORIZED_STATUS_CODE,
)
from castor.errors import DriverError, ErrorKind

log = logging.getLogger(__name__)

UNAUTHORIZED_MESSAGE = "Invalid API key"
RATE_LIMITED_MESSAGE = "Too many requests, please try again later"
SERVER_ERROR_MESSAGE = "Service temporarily unavailable, please try again later"
NETWORK_ERROR_MESSAGE = "Network connection failed, check your network settings"
UNKNOWN_ERROR_MESSAGE = "Unknown error"


def extract_error_message(body_text: str) -> str | None:
    """Best-effort ``error.message`` from a JSON error body.

    Returns None when the body is not JSON or carries no usable message.
    """
    if not body_text:
        return None
    try:
        payload: Any = json.loads(body_text)
    except ValueError:
        return None
    if not isinstance(payload, dict):
        return None
    error = payload.get("error")
    if not isinstance(error, dict):
        return None
    message = error.get("message")
    if isinstance(message, str) and message:
        return message
    return None


def classify_status(status_code: int, body_text: str = "") -> DriverError:
    """Classify a non-2xx response."""
    if status_code == UNAUTHORIZED_STATUS_CODE:
        return DriverError(
            UNAUTHORIZED_MESSAGE,
            kind=ErrorKind.UNAUTHORIZED,
            status_code=status_code,
            hint="Check the key (try setting GEMINI_API_KEY or ApiConfig.api_key).",
        )
    if status_code == RATE_LIMITED_STATUS_CODE:
        return DriverError(
            RATE_LIMITED_MESSAGE,
            kind=ErrorKind.RATE_LIMITED,
            status_code=status_code,
        )
    if status_code in SERVER_ERROR_STATUS_CODES:
        return DriverError(
            SERVER_ERROR_MESSAGE,
            kind=ErrorKind.SERVER_ERROR,
            status_code=status_code,
        )

    message = extract_error_message(body_text) or f"request failed: {status_code}"
    return DriverError(message, kind=ErrorKind.UNKNOWN_ERROR, status_code=status_code)


def is_network_error(exc: BaseException) -> bool:
    """Return True for connectivity failures (connect, read, timeout, DNS)."""
    return isinstance(exc, (httpx.TransportError, ConnectionError, TimeoutError))


def classify_exception(exc: BaseException) -> DriverError:
    """Classify an exception raised while calling the service.

    An already-classified ``DriverError`` is returned unchanged.
    """
    if isinstance(exc, asyncio.CancelledError):
        raise exc

    if isinstance(exc, DriverError):
        return exc

    if is_network_error(exc):
        log.debug("Classified %s as network failure", type(exc).__name__)
        return DriverError(NETWORK_ERROR_MESSAGE, kind=ErrorKind.NETWORK_ERROR)

    # json.JSONDecodeError and pydantic.ValidationError are both ValueErrors.
    note = "malformed response" if isinstance(exc, ValueError) else "unexpected failure"
    log.debug("Classified %s as %s", type(exc).__name__, note)
    return DriverError(str(exc) or UNKNOWN_ERROR_MESSAGE, kind=ErrorKind.UNKNOWN_ERROR)
