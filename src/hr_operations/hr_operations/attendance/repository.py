from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import AttendanceStatus
from .model import AttendanceFilter, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def record_check_in(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in_time: datetime,
        notes: Optional[str] = None,
    ) -> int:
        """Self-marking insert; marked_by is the employee."""

        raise NotImplementedError

    def update_mark(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        notes: Optional[str],
        check_out_time: Optional[datetime],
        working_hours: Optional[Decimal],
    ) -> bool:
        raise NotImplementedError

    def upsert(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        marked_by: str,
        notes: Optional[str] = None,
    ) -> int:
        """Create or replace the status of the (employee, date) record."""

        raise NotImplementedError

    def insert_if_absent(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        marked_by: str,
        notes: Optional[str] = None,
    ) -> bool:
        """True if a record was created, False if one already existed."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        raise NotImplementedError

    def search(
        self,
        filters: AttendanceFilter,
        *,
        offset: int,
        limit: int,
    ) -> Tuple[Sequence[AttendanceRecord], int]:
        """Newest first; returns (page rows, total matching)."""

        raise NotImplementedError
