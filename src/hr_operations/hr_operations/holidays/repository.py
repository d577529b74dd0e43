from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from .model import Holiday


class HolidayRepository(Protocol):
    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        raise NotImplementedError

    def get_by_date(self, holiday_date: date) -> Optional[Holiday]:
        raise NotImplementedError

    def list_range(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        """Holidays in [start, end], ordered by date; open bounds are unbounded."""

        raise NotImplementedError

    def create(self, *, holiday_date: date, name: str, description: Optional[str] = None) -> int:
        raise NotImplementedError

    def update(self, *, holiday_id: int, holiday_date: date, name: str, description: Optional[str]) -> bool:
        raise NotImplementedError

    def delete(self, holiday_id: int) -> bool:
        raise NotImplementedError
