"""ID normalization and timestamp utilities."""

from datetime import datetime, timezone
from typing import Any


def normalize_token(value: Any) -> str | None:
    """Strip a value to a non-empty string, or None."""
    if value is None:
        return None
    token = str(value).strip()
    return token or None


def normalize_row_id(value: Any) -> str | None:
    """Normalize an editor row id."""
    return normalize_token(value)


def normalize_well_id(value: Any) -> str | None:
    """Normalize a well id."""
    return normalize_token(value)


def safe_request_id(value: Any) -> int | None:
    """Return value as a positive integer request id, or None.

    Booleans are rejected even though they are ints in Python.
    """
    if isinstance(value, bool):
        return None
    if isinstance(value, int):
        return value if value > 0 else None
    if isinstance(value, float) and value.is_integer():
        return int(value) if value > 0 else None
    return None


def utc_timestamp() -> str:
    """Generate an ISO8601 UTC timestamp."""
    return datetime.now(timezone.utc).isoformat()
