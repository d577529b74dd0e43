from __future__ import annotations

import logging
from typing import Iterable, Optional, Sequence

from ..common.validators import require_non_empty
from ..core.enums import AttendanceStatus, LeaveType
from ..core.exceptions import InsufficientBalanceError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..settings.provider import CompanySettingsProvider
from .model import LeaveBalance, accrue_streak
from .repository import BalanceRepository

log = logging.getLogger(__name__)


class BalanceLedger:
    """Per-employee paid-leave balances (sick / casual / earned).

    Balances never go negative and interns always hold zero. The only debit
    path in normal operation is final leave approval.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        balances: BalanceRepository,
        settings: CompanySettingsProvider,
    ):
        self._employees = employees
        self._balances = balances
        self._settings = settings

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get_balance(self, employee_id: int) -> LeaveBalance:
        e = self._require_employee(employee_id)
        return LeaveBalance(sick=e.sick_leave_balance, casual=e.casual_leave_balance, earned=e.earned_leave_balance)

    def list_balances(self) -> Sequence[dict]:
        out = []
        for e in self._employees.list_active(full_time_only=True):
            row = {"employee_id": e.employee_id, "name": e.full_name, "role": e.role.value}
            row.update(
                LeaveBalance(e.sick_leave_balance, e.casual_leave_balance, e.earned_leave_balance).to_dict()
            )
            row["consecutive_working_days"] = e.consecutive_working_days
            out.append(row)
        return out

    @staticmethod
    def ensure_sufficient(employee: Employee, leave_type: LeaveType, days: int) -> None:
        if not leave_type.is_paid:
            return
        if employee.is_intern:
            raise ValidationError("Interns can only apply for unpaid leave")
        available = employee.balance_for(leave_type)
        if available < int(days):
            raise InsufficientBalanceError(leave_type.value, available=available, requested=int(days))

    def debit(self, employee_id: int, leave_type: LeaveType, days: int) -> None:
        if int(days) <= 0:
            raise ValidationError("Days to debit must be greater than 0")
        if not leave_type.is_paid:
            return

        employee = self._require_employee(employee_id)
        self.ensure_sufficient(employee, leave_type, days)
        if not self._balances.debit(employee_id=employee.employee_id, leave_type=leave_type, days=int(days)):
            # Changed between the read and the conditional update.
            current = self._require_employee(employee_id).balance_for(leave_type)
            raise InsufficientBalanceError(leave_type.value, available=current, requested=int(days))
        log.info("Debited %s %s day(s) from employee %s", days, leave_type.value, employee_id)

    def adjust(self, employee_id: int, leave_type: LeaveType, adjustment, reason: Optional[str]) -> dict:
        """HR correction of one balance by a signed number of days."""
        if not leave_type.is_paid:
            raise ValidationError("Unpaid leave has no balance to adjust")
        if isinstance(adjustment, bool) or not isinstance(adjustment, int):
            raise ValidationError("adjustment must be an integer")
        if adjustment == 0:
            raise ValidationError("adjustment must not be 0")
        reason = require_non_empty(reason, "reason")

        employee = self._require_employee(employee_id)
        if employee.is_intern:
            raise ValidationError("Interns do not have leave balances")

        previous = employee.balance_for(leave_type)
        if previous + adjustment < 0 or not self._balances.adjust(
            employee_id=employee.employee_id, leave_type=leave_type, delta=adjustment
        ):
            current = self._require_employee(employee_id).balance_for(leave_type)
            raise ValidationError(
                f"Adjustment would result in negative balance. Current: {current}, Adjustment: {adjustment}"
            )

        log.info(
            "Adjusted %s balance of employee %s by %s (%s)", leave_type.value, employee_id, adjustment, reason
        )
        return {
            "employee_id": employee.employee_id,
            "employee_name": employee.full_name,
            "leave_type": leave_type.value,
            "previous_balance": previous,
            "adjustment": adjustment,
            "new_balance": previous + adjustment,
            "reason": reason,
        }

    def accrue_earned_leave(
        self, employee: Employee, month: str, statuses: Iterable[AttendanceStatus]
    ) -> Optional[int]:
        """Apply one month of date-ordered attendance to the earned-leave streak.

        Returns the days accrued, or None if the month was already applied.
        """
        if employee.is_intern:
            return 0
        earned, streak = accrue_streak(employee.consecutive_working_days, statuses)
        if not self._balances.record_accrual(
            employee_id=employee.employee_id, month=month, streak=streak, earned=earned
        ):
            return None
        if earned:
            log.info("Employee %s accrued %s earned leave day(s) for %s", employee.employee_id, earned, month)
        return earned

    def initialize_employee(self, employee_id: int) -> LeaveBalance:
        """Onboarding: policy allotments for full-time staff, zeros for interns."""
        employee = self._require_employee(employee_id)
        if employee.is_intern:
            balance = LeaveBalance(0, 0, 0)
        else:
            policy = self._settings.get_leave_policy_defaults()
            balance = LeaveBalance(policy.sick, policy.casual, policy.earned)

        self._balances.set_balances(
            employee_id=employee.employee_id,
            sick=balance.sick,
            casual=balance.casual,
            earned=balance.earned,
        )
        return balance

    def reset_all(self) -> dict:
        policy = self._settings.get_leave_policy_defaults()
        updated = self._balances.reset_full_time(policy=policy)
        log.info(
            "Leave balances reset for %s employee(s): sick=%s casual=%s earned=%s",
            updated,
            policy.sick,
            policy.casual,
            policy.earned,
        )
        return {
            "employees_updated": updated,
            "leave_policy": {"sick": policy.sick, "casual": policy.casual, "earned": policy.earned},
        }
