"""
UTC datetime utilities for consistent timezone handling.

All datetime values written to the document store are timezone-aware UTC.
"""

from datetime import UTC, datetime, timedelta


def utc_now() -> datetime:
    """
    Return the current UTC datetime with timezone info.

    Returns:
        Timezone-aware datetime in UTC
    """
    return datetime.now(UTC)


def add_days(dt: datetime, days: int) -> datetime:
    """Return dt shifted by a whole number of days (used for invoice due dates)."""
    return dt + timedelta(days=days)
