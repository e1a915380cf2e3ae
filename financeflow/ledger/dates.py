"""Calendar helpers for the analytics windows."""

import calendar
from datetime import date, datetime
from typing import TypeVar

D = TypeVar("D", date, datetime)


def clamp_day_to_month(year: int, month: int, day: int) -> int:
    """Clamp day to valid range for the given year/month."""
    max_day = calendar.monthrange(year, month)[1]
    return min(day, max_day)


def add_months(d: D, n: int) -> D:
    """Add n months to d, clamping the day to the month end. Keeps the time of day."""
    month = d.month - 1 + n
    year = d.year + month // 12
    month = month % 12 + 1
    day = clamp_day_to_month(year, month, d.day)
    return d.replace(year=year, month=month, day=day)


def whole_months_between(start: datetime, end: datetime) -> int:
    """
    Number of complete months elapsed from start to end.

    Negative when end is before start. 2026-01-15 10:00 -> 2026-02-15 09:59
    is 0, 2026-01-15 10:00 -> 2026-02-15 10:00 is 1. Month-end days clamp,
    so 2026-01-31 -> 2026-02-28 is also 1.
    """
    if end < start:
        return -whole_months_between(end, start)
    months = (end.year - start.year) * 12 + (end.month - start.month)
    if add_months(start, months) > end:
        months -= 1
    return months
