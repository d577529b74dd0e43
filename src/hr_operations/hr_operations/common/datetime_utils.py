from __future__ import annotations

import calendar
import re
from datetime import date, datetime, timedelta
from typing import AbstractSet, Iterator, Protocol, Union

from ..core.exceptions import ValidationError

_MONTH_RE = re.compile(r"^(\d{4})-(\d{2})$")

DateLike = Union[date, datetime]


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD string into date."""
    if not isinstance(value, str):
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")
    try:
        return datetime.strptime(value.strip(), "%Y-%m-%d").date()
    except ValueError:
        raise ValidationError(f"Invalid date (YYYY-MM-DD): {value!r}")


def as_date(value: DateLike) -> date:
    """Strip the time of day; equality is by calendar date."""
    if isinstance(value, datetime):
        return value.date()
    return value


def now_local() -> datetime:
    """Current local time.

    Note: Wrapped so tests can patch/mocked easier.
    """
    return datetime.now()


class Clock(Protocol):
    def now(self) -> datetime:
        raise NotImplementedError

    def today(self) -> date:
        raise NotImplementedError


class SystemClock:
    def now(self) -> datetime:
        return now_local()

    def today(self) -> date:
        return now_local().date()


class FixedClock:
    """Clock pinned to one instant (tests, replaying a job for a past day)."""

    def __init__(self, instant: DateLike):
        if not isinstance(instant, datetime):
            instant = datetime.combine(instant, datetime.min.time())
        self._instant = instant

    def now(self) -> datetime:
        return self._instant

    def today(self) -> date:
        return self._instant.date()


def month_key(year: int, month: int) -> str:
    return f"{int(year):04d}-{int(month):02d}"


def parse_month_key(value: str) -> tuple[int, int]:
    """Parse canonical "YYYY-MM" into (year, month)."""
    m = _MONTH_RE.match(value.strip()) if isinstance(value, str) else None
    if not m:
        raise ValidationError(f"Invalid month (YYYY-MM): {value!r}")
    year, month = int(m.group(1)), int(m.group(2))
    if not 1 <= month <= 12:
        raise ValidationError(f"Invalid month (YYYY-MM): {value!r}")
    return year, month


def month_bounds(year: int, month: int) -> tuple[date, date]:
    first = date(int(year), int(month), 1)
    last = date(int(year), int(month), calendar.monthrange(int(year), int(month))[1])
    return first, last


def previous_month(today: date) -> tuple[int, int]:
    first = today.replace(day=1)
    prev = first - timedelta(days=1)
    return prev.year, prev.month


def iter_dates(start: date, end: date) -> Iterator[date]:
    """Every calendar date in [start, end], inclusive."""
    current = start
    while current <= end:
        yield current
        current += timedelta(days=1)


def overlap_days(start: date, end: date, window_start: date, window_end: date) -> int:
    """Number of calendar days shared by two inclusive ranges."""
    lo = max(start, window_start)
    hi = min(end, window_end)
    if hi < lo:
        return 0
    return (hi - lo).days + 1


def is_working_day(day: date, working_days: AbstractSet[int], holidays: AbstractSet[date]) -> bool:
    """Working day = configured ISO weekday and not a registered holiday."""
    return day.isoweekday() in working_days and day not in holidays


def working_days_between(
    start: date,
    end: date,
    working_days: AbstractSet[int],
    holidays: AbstractSet[date],
) -> list[date]:
    return [d for d in iter_dates(start, end) if is_working_day(d, working_days, holidays)]
