"""
Datetime utilities.

Provides timezone-aware datetime functions.
"""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """
    Get current UTC datetime with timezone info.

    Returns:
        Current datetime in UTC with timezone awareness
    """
    return datetime.now(UTC)


def month_key(moment: datetime | None = None) -> str:
    """
    Get calendar month key in "YYYY-MM" format.

    Naive datetimes are treated as UTC; aware ones are converted to UTC first.

    Args:
        moment: Point in time (default: now)

    Returns:
        Month key, e.g. "2025-10"
    """
    if moment is None:
        moment = utc_now()
    elif moment.tzinfo is not None:
        moment = moment.astimezone(UTC)
    return f"{moment.year:04d}-{moment.month:02d}"


def is_valid_month_key(value: str) -> bool:
    """Check "YYYY-MM" format with a month in 01..12."""
    if len(value) != 7 or value[4] != "-":
        return False
    year, month = value[:4], value[5:]
    if not (year.isdigit() and month.isdigit()):
        return False
    return 1 <= int(month) <= 12
