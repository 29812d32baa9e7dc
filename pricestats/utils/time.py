"""UTC helpers.

All times are UTC and timezone-aware. Stored timestamps use a fixed-width
ISO 8601 format so that string order matches chronological order.
"""

from __future__ import annotations

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Return the current UTC datetime, timezone-aware."""
    return datetime.now(UTC)


def ensure_utc(dt: datetime) -> datetime:
    """Treat naive datetimes as UTC and convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=UTC)
    return dt.astimezone(UTC)


def format_timestamp(dt: datetime) -> str:
    """Format a datetime as ISO 8601 with microsecond precision and Z suffix.

    Output format: YYYY-MM-DDTHH:MM:SS.ffffffZ
    """
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%S.%fZ")


def parse_timestamp(s: str) -> datetime:
    """Parse an ISO 8601 timestamp with Z suffix back to UTC datetime."""
    if s.endswith("Z"):
        s = s[:-1] + "+00:00"
    return datetime.fromisoformat(s)


def from_unix_millis(ms: float) -> datetime:
    """Convert a Unix epoch in milliseconds to a UTC datetime."""
    return datetime.fromtimestamp(ms / 1000, tz=UTC)
