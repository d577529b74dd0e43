from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Optional

from ..core.enums import EmployeeType, LeaveType, Role


@dataclass(frozen=True)
class Employee:
    """Domain entity: Employee (the subset the leave/attendance/payroll engine reads).

    Plain data object; no DB access.
    """

    employee_id: int
    full_name: str
    email: Optional[str]
    role: Role
    employee_type: EmployeeType
    salary: Decimal
    manager_id: Optional[int]
    sick_leave_balance: int = 0
    casual_leave_balance: int = 0
    earned_leave_balance: int = 0
    is_active: bool = True
    consecutive_working_days: int = 0
    last_accrual_month: Optional[str] = None

    @property
    def is_intern(self) -> bool:
        return self.employee_type == EmployeeType.INTERN

    def balance_for(self, leave_type: LeaveType) -> int:
        return {
            LeaveType.SICK: self.sick_leave_balance,
            LeaveType.CASUAL: self.casual_leave_balance,
            LeaveType.EARNED: self.earned_leave_balance,
        }.get(leave_type, 0)
