from __future__ import annotations

from dataclasses import dataclass
from datetime import date

from ..core.enums import LeaveType

LEAVE_APPROVED = "leave.approved"


@dataclass(frozen=True)
class LeaveApproved:
    """Published after a leave request reaches APPROVED and the transaction committed."""

    request_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    approved_by: int
