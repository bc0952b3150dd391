"""Timezone-aware datetime utilities.

This module provides consistent timezone handling across the application.
All datetime values should use UTC timezone for storage and comparison.
"""

from datetime import date, datetime, timezone
from typing import Callable

# Injectable source of "now" (used by the analytics engine and its tests)
Clock = Callable[[], datetime]


def utc_now() -> datetime:
    """Get current datetime with UTC timezone.

    This replaces datetime.utcnow() which returns naive datetime.
    Always use this function instead of datetime.utcnow() or datetime.now().

    Returns:
        Current datetime with UTC timezone
    """
    return datetime.now(timezone.utc)


def ensure_utc(dt: datetime | None) -> datetime | None:
    """Ensure datetime has UTC timezone.

    If datetime is naive (no timezone), assumes UTC and adds it.
    If datetime has different timezone, converts to UTC.

    Args:
        dt: Datetime to ensure is UTC

    Returns:
        Datetime with UTC timezone, or None if input is None
    """
    if dt is None:
        return None

    if dt.tzinfo is None:
        return dt.replace(tzinfo=timezone.utc)

    return dt.astimezone(timezone.utc)


def utc_date(dt: datetime) -> date:
    """Get the UTC calendar day of a datetime."""
    return ensure_utc(dt).date()


def days_between(earlier: datetime, later: datetime) -> float:
    """Fractional number of days from ``earlier`` to ``later``."""
    return (ensure_utc(later) - ensure_utc(earlier)).total_seconds() / 86400


def datetime_to_iso(dt: datetime | None) -> str | None:
    """Convert datetime to ISO 8601 string.

    Args:
        dt: Datetime to convert

    Returns:
        ISO 8601 formatted string, or None if input is None
    """
    if dt is None:
        return None
    return ensure_utc(dt).isoformat()
