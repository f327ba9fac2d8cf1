from __future__ import annotations

from calendar import monthrange
from datetime import MAXYEAR, MINYEAR, UTC, datetime


def utcnow() -> datetime:
    return datetime.now(UTC)


def add_months(value: datetime, months: int) -> datetime:
    """Shift by calendar months, clamping the day to the target month's last day.

    Jan 31 + 1 month lands on Feb 29 in leap years and Feb 28 otherwise.
    Time of day and tzinfo are preserved. Raises OverflowError past the
    supported year range, like ``datetime + timedelta`` does.
    """
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    if not MINYEAR <= year <= MAXYEAR:
        raise OverflowError("date value out of range")
    _, last_day = monthrange(year, month)
    return value.replace(year=year, month=month, day=min(value.day, last_day))
