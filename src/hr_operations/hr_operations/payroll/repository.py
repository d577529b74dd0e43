from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Protocol, Sequence

from ..core.enums import ReimbursementStatus
from .model import Payslip, PayslipFigures, WorkingDaysConfig, WorkingDaysOverride


class PayslipRepository(Protocol):
    def upsert(self, *, employee_id: int, month: str, figures: PayslipFigures, regenerated_at: datetime) -> int:
        """Insert or recompute the (employee, month) payslip; returns its id."""

        raise NotImplementedError

    def get(self, payslip_id: int) -> Optional[Payslip]:
        raise NotImplementedError

    def list_for_month(self, month: str) -> Sequence[Payslip]:
        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, year: Optional[int] = None) -> Sequence[Payslip]:
        """Newest month first."""

        raise NotImplementedError

    def count_for_month(self, month: str) -> int:
        raise NotImplementedError


class CompensationRepository(Protocol):
    def sum_rewards(self, employee_id: int, *, start: date, end: date) -> Decimal:
        raise NotImplementedError

    def sum_reimbursements(
        self,
        employee_id: int,
        *,
        start: date,
        end: date,
        statuses: Sequence[ReimbursementStatus],
    ) -> Decimal:
        raise NotImplementedError


class WorkingDaysRepository(Protocol):
    def get(self, month: str) -> Optional[WorkingDaysConfig]:
        """The HR-set configuration for ``month``, or None when none was saved."""

        raise NotImplementedError

    def save(
        self,
        *,
        month: str,
        working_days: int,
        overrides: Sequence[WorkingDaysOverride],
        notes: Optional[str],
        set_by: Optional[int],
    ) -> None:
        raise NotImplementedError
