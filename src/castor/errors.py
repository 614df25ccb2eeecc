"""Exception hierarchy for Castor.

Every failure the driver surfaces is a :class:`DriverError` tagged with one
:class:`ErrorKind`. The kind set is closed, so call sites can branch on
``err.kind`` exhaustively instead of relying on subclass checks.
"""

from __future__ import annotations

from enum import StrEnum


class ErrorKind(StrEnum):
    """Closed taxonomy of driver failures."""

    VALIDATION_ERROR = "VALIDATION_ERROR"
    UNAUTHORIZED = "UNAUTHORIZED"
    RATE_LIMITED = "RATE_LIMITED"
    SERVER_ERROR = "SERVER_ERROR"
    NETWORK_ERROR = "NETWORK_ERROR"
    UNKNOWN_ERROR = "UNKNOWN_ERROR"


_RETRYABLE_KINDS: frozenset[ErrorKind] = frozenset(
    {ErrorKind.RATE_LIMITED, ErrorKind.SERVER_ERROR, ErrorKind.NETWORK_ERROR}
)


class CastorError(Exception):
    """Base exception for all Castor errors."""

    def __init__(self, message: str, *, hint: str | None = None) -> None:
        super().__init__(message)
        self.hint = hint


class DriverError(CastorError):
    """A classified driver failure, ready for display.

    ``message`` is display-ready wording owned by the classifier.
    ``status_code`` is set when the failure came from an HTTP response.
    """

    def __init__(
        self,
        message: str,
        *,
        kind: ErrorKind,
        status_code: int | None = None,
        hint: str | None = None,
    ) -> None:
        super().__init__(message, hint=hint)
        self.message = message
        self.kind = kind
        self.status_code = status_code

    @property
    def retryable(self) -> bool:
        """Whether the caller may reasonably try again.

        Informational only: the driver itself never retries.
        """
        return self.kind in _RETRYABLE_KINDS

    def __repr__(self) -> str:
        """Return a compact debugging representation."""
        return (
            f"DriverError(kind={self.kind.value}, status_code={self.status_code!r}, "
            f"message={self.message!r})"
        )


def validation_error(message: str, *, hint: str | None = None) -> DriverError:
    """Build a VALIDATION_ERROR for a rejected input."""
    return DriverError(message, kind=ErrorKind.VALIDATION_ERROR, hint=hint)
