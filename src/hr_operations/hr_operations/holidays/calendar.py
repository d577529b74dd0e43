from __future__ import annotations

from datetime import date

from ..common.datetime_utils import DateLike, as_date, is_working_day, working_days_between
from ..settings.provider import CompanySettingsProvider
from .service import HolidayDirectory


class WorkingCalendar:
    """Working day = configured weekday that is not a registered holiday."""

    def __init__(self, holidays: HolidayDirectory, settings: CompanySettingsProvider):
        self._holidays = holidays
        self._settings = settings

    def working_days(self, start: DateLike, end: DateLike) -> list[date]:
        start_d, end_d = as_date(start), as_date(end)
        if end_d < start_d:
            return []
        return working_days_between(
            start_d,
            end_d,
            self._settings.get_working_days(),
            self._holidays.holiday_dates(start_d, end_d),
        )

    def count_working_days(self, start: DateLike, end: DateLike) -> int:
        return len(self.working_days(start, end))

    def is_working_day(self, day: DateLike) -> bool:
        d = as_date(day)
        return is_working_day(d, self._settings.get_working_days(), self._holidays.holiday_dates(d, d))

    def is_weekend(self, day: DateLike) -> bool:
        return as_date(day).isoweekday() not in self._settings.get_working_days()
