"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime, timedelta

from ledger_core.config.constants import SECONDS_PER_DAY


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def ensure_utc(value: datetime) -> datetime:
    """Attach UTC to naive datetimes, convert aware ones to UTC."""
    if value.tzinfo is None:
        return value.replace(tzinfo=UTC)
    return value.astimezone(UTC)


def whole_days_between(start: datetime, end: datetime) -> int:
    """
    Number of whole 24-hour periods from ``start`` to ``end``.

    Negative when ``end`` precedes ``start``.
    """
    seconds = (ensure_utc(end) - ensure_utc(start)).total_seconds()
    return int(seconds // SECONDS_PER_DAY)


def add_days(value: datetime, days: int) -> datetime:
    return value + timedelta(days=days)
