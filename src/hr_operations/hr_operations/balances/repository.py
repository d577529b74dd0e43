from __future__ import annotations

from typing import Protocol

from ..core.enums import LeaveType
from ..settings.model import LeavePolicy


class BalanceRepository(Protocol):
    def debit(self, *, employee_id: int, leave_type: LeaveType, days: int) -> bool:
        """Atomically subtract ``days``; False (no change) if the result would be negative."""

        raise NotImplementedError

    def set_balances(self, *, employee_id: int, sick: int, casual: int, earned: int) -> bool:
        raise NotImplementedError

    def reset_full_time(self, *, policy: LeavePolicy) -> int:
        """Set every full-time employee to the policy allotments; interns to zero. Returns rows updated."""

        raise NotImplementedError

    def adjust(self, *, employee_id: int, leave_type: LeaveType, delta: int) -> bool:
        """Add ``delta`` (may be negative) to a full-time balance; False if it would go below zero."""

        raise NotImplementedError

    def record_accrual(self, *, employee_id: int, month: str, streak: int, earned: int) -> bool:
        """Store the carried streak and add ``earned`` days, at most once per month.

        Returns False when the month was already processed for this employee.
        """

        raise NotImplementedError
