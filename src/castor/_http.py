"""Small HTTP-related constants shared across Castor.

This module is intentionally tiny to avoid circular imports and drift.
"""

from __future__ import annotations

# Statuses the service uses for transient server-side failures.
SERVER_ERROR_STATUS_CODES: frozenset[int] = frozenset({500, 502, 503})

UNAUTHORIZED_STATUS_CODE = 401
RATE_LIMITED_STATUS_CODE = 429

JSON_HEADERS: dict[str, str] = {"Content-Type": "application/json"}
