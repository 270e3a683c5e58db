from __future__ import annotations

import calendar
from datetime import date, datetime, time, timedelta
from typing import Callable, Iterator

from ..core.constants import MINUTES_PER_DAY

Clock = Callable[[], datetime]


def now_local() -> datetime:
    """Current local time.

    Note: Services take a ``clock`` callable defaulting to this one so tests
    can pass a fixed time instead.
    """
    return datetime.now()


def minutes_of(value: time) -> int:
    """Minutes since midnight, seconds ignored."""
    return value.hour * 60 + value.minute


def span_minutes(start: time, end: time, *, overnight: bool) -> int:
    """Length of a start/end window in minutes.

    Overnight windows (22:00 - 06:00) wrap through midnight.
    """
    start_m = minutes_of(start)
    end_m = minutes_of(end)
    if overnight and end_m < start_m:
        return (MINUTES_PER_DAY - start_m) + end_m
    return end_m - start_m


def add_months(value: date, months: int) -> date:
    """Same day ``months`` later, clamped to the end of the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    day = min(value.day, calendar.monthrange(year, month)[1])
    return date(year, month, day)


def iter_days(start: date, end: date) -> Iterator[date]:
    """Every date from start to end inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def days_inclusive(start: date, end: date) -> int:
    return (end - start).days + 1


def ranges_overlap(a_start: date, a_end: date | None, b_start: date, b_end: date | None) -> bool:
    """Closed-interval overlap where ``None`` means open-ended."""
    if a_end is not None and a_end < b_start:
        return False
    if b_end is not None and b_end < a_start:
        return False
    return True
