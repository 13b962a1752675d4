# ==============================================================================
# Timestamp Helpers
# ==============================================================================
"""
ISO-8601 timestamp helpers shared by the domain layer and the repositories.

Events arrive from the browser as ISO strings (``2025-03-01T10:00:00.000Z``)
and come back from storage either as strings (SQLite) or as datetime objects
(PostgreSQL). Everything is normalized to timezone-aware UTC.
"""

from datetime import UTC, datetime, timedelta

_ONE_MS = timedelta(milliseconds=1)


def parse_timestamp(value: str | datetime) -> datetime:
    """
    Parse an ISO-8601 string (or pass through a datetime) as aware UTC.

    Naive values are assumed to be UTC.

    Raises:
        ValueError: If the string is not a valid ISO-8601 instant
        TypeError: If the value is neither a string nor a datetime
    """
    if isinstance(value, datetime):
        parsed = value
    elif isinstance(value, str):
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    else:
        raise TypeError(f"Unsupported timestamp type: {type(value).__name__}")

    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=UTC)
    return parsed.astimezone(UTC)


def format_timestamp(value: str | datetime) -> str:
    """Format a timestamp as a millisecond-precision UTC ISO string."""
    return parse_timestamp(value).isoformat(timespec="milliseconds").replace("+00:00", "Z")


def elapsed_ms(start: str | datetime, end: str | datetime) -> int:
    """Milliseconds from ``start`` to ``end`` (negative if ``end`` is earlier)."""
    return (parse_timestamp(end) - parse_timestamp(start)) // _ONE_MS


def utc_now() -> datetime:
    """Current time as aware UTC."""
    return datetime.now(UTC)
