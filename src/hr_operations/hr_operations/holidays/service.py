from __future__ import annotations

import logging
from datetime import date, timedelta
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, DateLike, SystemClock, as_date, month_bounds
from ..common.validators import optional_text, require_date_range, require_non_empty
from ..core.constants import DEFAULT_UPCOMING_HOLIDAY_DAYS
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from .model import Holiday
from .repository import HolidayRepository

log = logging.getLogger(__name__)


class HolidayDirectory:
    """Authoritative calendar of non-working dates."""

    def __init__(self, holidays: HolidayRepository, *, clock: Optional[Clock] = None):
        self._holidays = holidays
        self._clock = clock or SystemClock()

    # -------- Queries used by the leave / attendance / payroll engine --------
    def is_holiday(self, day: DateLike) -> bool:
        return self._holidays.get_by_date(as_date(day)) is not None

    def holidays_in_range(self, start: DateLike, end: DateLike) -> list[Holiday]:
        start_d, end_d = as_date(start), as_date(end)
        require_date_range(start_d, end_d)
        return sorted(self._holidays.list_range(start=start_d, end=end_d), key=lambda h: h.holiday_date)

    def count_holidays_in_range(self, start: DateLike, end: DateLike) -> int:
        return len(self.holidays_in_range(start, end))

    def holiday_dates(self, start: DateLike, end: DateLike) -> frozenset[date]:
        return frozenset(h.holiday_date for h in self.holidays_in_range(start, end))

    # -------- Administration --------
    def get(self, holiday_id: int) -> Holiday:
        holiday = self._holidays.get_by_id(int(holiday_id))
        if not holiday:
            raise NotFoundError("Holiday not found")
        return holiday

    def list(
        self,
        *,
        year: Optional[int] = None,
        start: Optional[date] = None,
        end: Optional[date] = None,
    ) -> Sequence[Holiday]:
        if start and end:
            require_date_range(start, end)
            return self._holidays.list_range(start=start, end=end)
        if year:
            return self._holidays.list_range(start=date(int(year), 1, 1), end=date(int(year), 12, 31))
        return self._holidays.list_range()

    def for_month(self, year: int, month: int) -> Sequence[Holiday]:
        first, last = month_bounds(year, month)
        return self._holidays.list_range(start=first, end=last)

    def upcoming(self, days: int = DEFAULT_UPCOMING_HOLIDAY_DAYS) -> Sequence[Holiday]:
        if int(days) < 0:
            raise ValidationError("days must be >= 0")
        today = self._clock.today()
        return self._holidays.list_range(start=today, end=today + timedelta(days=int(days)))

    def create(self, *, holiday_date: DateLike, name: str, description: Optional[str] = None) -> Holiday:
        day = as_date(holiday_date)
        name = require_non_empty(name, "Holiday name")
        if self._holidays.get_by_date(day):
            raise ConflictError("A holiday already exists on this date")

        holiday_id = self._holidays.create(holiday_date=day, name=name, description=optional_text(description))
        log.info("Holiday %s created on %s", name, day)
        return self.get(holiday_id)

    def update(
        self,
        holiday_id: int,
        *,
        holiday_date: Optional[DateLike] = None,
        name: Optional[str] = None,
        description: Optional[str] = None,
    ) -> Holiday:
        current = self.get(holiday_id)
        new_date = as_date(holiday_date) if holiday_date else current.holiday_date
        new_name = require_non_empty(name, "Holiday name") if name is not None else current.name
        new_description = optional_text(description) if description is not None else current.description

        if new_date != current.holiday_date:
            clash = self._holidays.get_by_date(new_date)
            if clash and clash.holiday_id != current.holiday_id:
                raise ConflictError("A holiday already exists on this date")

        self._holidays.update(
            holiday_id=current.holiday_id,
            holiday_date=new_date,
            name=new_name,
            description=new_description,
        )
        return self.get(current.holiday_id)

    def delete(self, holiday_id: int) -> None:
        holiday = self.get(holiday_id)
        if not self._holidays.delete(holiday.holiday_id):
            raise NotFoundError("Holiday not found")
        log.info("Holiday %s on %s deleted", holiday.name, holiday.holiday_date)
