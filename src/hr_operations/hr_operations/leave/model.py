from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    request_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    number_of_days: int
    reason: str
    status: LeaveStatus
    created_at: datetime
    manager_approved: bool = False
    hr_approved: bool = False
    rejection_reason: Optional[str] = None
    employee_name: Optional[str] = None

    @property
    def is_paid(self) -> bool:
        return self.leave_type.is_paid

    def overlaps(self, start: date, end: date) -> bool:
        return self.start_date <= end and self.end_date >= start

    def to_dict(self) -> dict:
        return {
            "id": self.request_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "leave_type": self.leave_type.value,
            "start_date": self.start_date.isoformat(),
            "end_date": self.end_date.isoformat(),
            "number_of_days": self.number_of_days,
            "reason": self.reason,
            "is_paid": self.is_paid,
            "status": self.status.value,
            "manager_approved": self.manager_approved,
            "hr_approved": self.hr_approved,
            "rejection_reason": self.rejection_reason,
            "created_at": self.created_at.isoformat() if self.created_at else None,
        }


@dataclass(frozen=True)
class LeaveFilter:
    employee_id: Optional[int] = None
    leave_type: Optional[LeaveType] = None
    status: Optional[LeaveStatus] = None
    start_date: Optional[date] = None
    end_date: Optional[date] = None
    employee_ids: Optional[Sequence[int]] = None
