"""Endpoint validation and request URL composition."""

from __future__ import annotations

from dataclasses import dataclass
import re
from typing import TYPE_CHECKING
from urllib.parse import urlparse

if TYPE_CHECKING:
    from castor.config import ApiConfig

_KEY_PARAM_RE = re.compile(r"([?&]key=)[^&]*")


@dataclass(frozen=True)
class EndpointValidation:
    """Outcome of :func:`validate_endpoint`."""

    valid: bool
    error: str | None = None


def validate_endpoint(url: str | None) -> EndpointValidation:
    """Check that *url* is a well-formed http(s) base URL.

    Pure and side-effect free; never raises.
    """
    if not url or not url.strip():
        return EndpointValidation(False, "URL must not be empty")

    candidate = url.strip()
    if not candidate.startswith(("http://", "https://")):
        return EndpointValidation(False, "URL must start with http:// or https://")

    try:
        parsed = urlparse(candidate)
        # Accessing .port validates it; a malformed port raises ValueError.
        _ = parsed.port
    except ValueError:
        return EndpointValidation(False, "URL is malformed")

    if parsed.scheme not in ("http", "https"):
        return EndpointValidation(False, "URL scheme must be http or https")
    if not parsed.hostname:
        return EndpointValidation(False, "URL must include a valid hostname")
    if any(ch.isspace() for ch in parsed.hostname):
        return EndpointValidation(False, "URL is malformed")

    return EndpointValidation(True)


def build_request_url(config: ApiConfig, stream: bool = True) -> str:
    """Compose the generate URL for *config*.

    Trailing slashes on the endpoint are dropped. No validation happens here.
    """
    endpoint = (config.endpoint or "").rstrip("/")
    method = "streamGenerateContent" if stream else "generateContent"
    url = f"{endpoint}/models/{config.model}:{method}?key={config.api_key}"
    if stream:
        return f"{url}&alt=sse"
    return url


def redact_url(url: str) -> str:
    """Mask the ``key`` query parameter for safe logging."""
    return _KEY_PARAM_RE.sub(r"\1[REDACTED]", url)
