from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return a timezone-aware UTC datetime."""
    return datetime.now(UTC)


def utc_now_iso() -> str:
    """Return the current UTC time as ISO-8601 with a ``Z`` suffix."""
    return utc_now().isoformat().replace("+00:00", "Z")
