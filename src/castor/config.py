"""Configuration: frozen ApiConfig with environment-resolved defaults."""

from __future__ import annotations

from dataclasses import dataclass
import os

from dotenv import load_dotenv

load_dotenv()

DEFAULT_ENDPOINT = "https://generativelanguage.googleapis.com/v1beta"

API_KEY_ENV_VAR = "GEMINI_API_KEY"
ENDPOINT_ENV_VAR = "GEMINI_API_ENDPOINT"


@dataclass(frozen=True)
class ApiConfig:
    """Immutable connection settings for a single driver call.

    ``api_key`` and ``endpoint`` are auto-resolved from ``GEMINI_API_KEY`` and
    ``GEMINI_API_ENDPOINT`` when left as *None*. A missing key is not an error
    here; the driver rejects it at call time so the connectivity probe can
    report it as a result.

    The key travels in the ``key`` query parameter. Castor redacts it from its
    own log lines, but httpx logs full request URLs at INFO on the ``httpx``
    logger; keep that logger at WARNING or above when INFO logging is enabled.

    Example:
        config = ApiConfig(model="gemini-2.5-flash")
        # API key is automatically resolved from GEMINI_API_KEY
    """

    model: str
    #: Auto-resolved from ``GEMINI_API_KEY`` when *None*.
    api_key: str | None = None
    #: Auto-resolved from ``GEMINI_API_ENDPOINT``, then the public endpoint.
    endpoint: str | None = None

    def __post_init__(self) -> None:
        """Resolve unset fields from the environment."""
        if self.api_key is None:
            object.__setattr__(self, "api_key", os.environ.get(API_KEY_ENV_VAR, ""))
        if self.endpoint is None:
            resolved = os.environ.get(ENDPOINT_ENV_VAR) or DEFAULT_ENDPOINT
            object.__setattr__(self, "endpoint", resolved)

    def __str__(self) -> str:
        """Return a redacted, developer-friendly representation."""
        return (
            f"ApiConfig(endpoint={self.endpoint!r}, model={self.model!r}, "
            f"api_key={'[REDACTED]' if self.api_key else None})"
        )

    __repr__ = __str__
