from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one attendance status per (employee, date)."""

    attendance_id: int
    employee_id: int
    work_date: date
    status: AttendanceStatus
    marked_by: str
    notes: Optional[str] = None
    check_in_time: Optional[datetime] = None
    check_out_time: Optional[datetime] = None
    working_hours: Optional[Decimal] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "employee_id": self.employee_id,
            "date": self.work_date.isoformat(),
            "status": self.status.value,
            "marked_by": self.marked_by,
            "notes": self.notes,
            "check_in_time": self.check_in_time.isoformat() if self.check_in_time else None,
            "check_out_time": self.check_out_time.isoformat() if self.check_out_time else None,
            "working_hours": float(self.working_hours) if self.working_hours is not None else None,
        }


@dataclass(frozen=True)
class BulkMarkEntry:
    employee_id: int
    status: AttendanceStatus
    notes: Optional[str] = None


@dataclass(frozen=True)
class AttendanceFilter:
    employee_id: Optional[int] = None
    status: Optional[AttendanceStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
