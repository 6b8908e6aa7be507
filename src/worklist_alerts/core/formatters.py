"""
Shared datetime and display formatting helpers.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

# =============================================================================
# DateTime Parsing and Formatting
# =============================================================================


def parse_datetime(dt_str: str) -> Optional[datetime]:
    """
    Parse an ISO 8601 datetime string to an aware datetime.

    Accepts a trailing "Z", explicit offsets and fractional seconds.
    Naive values are treated as UTC.

    Args:
        dt_str: ISO format datetime string

    Returns:
        datetime object with timezone, or None if parsing fails

    Examples:
        >>> parse_datetime("2026-01-15T12:30:00Z")
        datetime.datetime(2026, 1, 15, 12, 30, tzinfo=datetime.timezone.utc)
    """
    if not dt_str or not isinstance(dt_str, str):
        return None

    value = dt_str.strip()
    if value.endswith(("Z", "z")):
        value = value[:-1] + "+00:00"

    try:
        parsed = datetime.fromisoformat(value)
    except ValueError:
        return None

    return ensure_utc(parsed)


def ensure_utc(dt: datetime) -> datetime:
    """Attach UTC to naive datetimes; convert aware ones to UTC."""
    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)
    return dt.astimezone(timezone.utc)


def format_datetime(dt: datetime) -> str:
    """
    Format datetime for output.

    Returns:
        ISO format string like "2026-01-15T12:30:00Z"
    """
    return ensure_utc(dt).strftime("%Y-%m-%dT%H:%M:%SZ")


def get_utc_now() -> datetime:
    """Get current UTC datetime."""
    return datetime.now(timezone.utc)


def get_utc_timestamp() -> str:
    """
    Get current UTC timestamp string.

    Returns:
        ISO format timestamp like "2026-01-15T12:30:00Z"
    """
    return format_datetime(get_utc_now())


def hours_between(earlier: datetime, later: datetime) -> float:
    """Signed number of hours from earlier to later."""
    return (later - earlier).total_seconds() / 3600.0


def to_epoch_ms(dt: datetime) -> int:
    """Milliseconds since the Unix epoch."""
    return int(ensure_utc(dt).timestamp() * 1000)


# =============================================================================
# Display Formatting
# =============================================================================


def format_usd(value: float) -> str:
    """
    Format a dollar amount with thousands separators.

    Examples:
        >>> format_usd(32000)
        '$32,000'
        >>> format_usd(1234.5)
        '$1,234.5'
    """
    if float(value).is_integer():
        return f"${int(value):,}"
    return f"${value:,.2f}".rstrip("0").rstrip(".")
