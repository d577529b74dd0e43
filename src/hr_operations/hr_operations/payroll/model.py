from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus


def _money(value: Decimal) -> float:
    return float(value)


@dataclass(frozen=True)
class PayslipInputs:
    """Everything the calculator needs for one employee and month, already loaded."""

    base_salary: Decimal
    working_days: int
    attendance: Sequence[AttendanceStatus]
    unpaid_leave_days: int
    rewards: Decimal = Decimal("0")
    reimbursements: Decimal = Decimal("0")


@dataclass(frozen=True)
class PayslipFigures:
    base_salary: Decimal
    working_days: int
    per_day_salary: Decimal
    actual_working_days: Decimal
    unpaid_leaves: int
    unapproved_absences: int
    holiday_sandwich: int
    rewards: Decimal
    reimbursements: Decimal
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal


@dataclass(frozen=True)
class Payslip:
    payslip_id: int
    employee_id: int
    month: str
    figures: PayslipFigures
    created_at: Optional[datetime] = None
    regenerated_at: Optional[datetime] = None
    employee_name: Optional[str] = None

    def to_dict(self) -> dict:
        f = self.figures
        return {
            "id": self.payslip_id,
            "employee_id": self.employee_id,
            "employee_name": self.employee_name,
            "month": self.month,
            "base_salary": _money(f.base_salary),
            "working_days": f.working_days,
            "actual_working_days": float(f.actual_working_days),
            "unpaid_leaves": f.unpaid_leaves,
            "unapproved_absences": f.unapproved_absences,
            "holiday_sandwich": f.holiday_sandwich,
            "rewards": _money(f.rewards),
            "reimbursements": _money(f.reimbursements),
            "gross_pay": _money(f.gross_pay),
            "deductions": _money(f.deductions),
            "net_pay": _money(f.net_pay),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "regenerated_at": self.regenerated_at.isoformat() if self.regenerated_at else None,
        }


@dataclass(frozen=True)
class PayslipFailure:
    employee_id: int
    error: str


@dataclass(frozen=True)
class GenerationResult:
    month: str
    payslips: Sequence[Payslip] = field(default_factory=tuple)
    failures: Sequence[PayslipFailure] = field(default_factory=tuple)

    @property
    def count(self) -> int:
        return len(self.payslips)

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "count": self.count,
            "payslips": [p.to_dict() for p in self.payslips],
            "failures": [{"employee_id": f.employee_id, "error": f.error} for f in self.failures],
        }


@dataclass(frozen=True)
class WorkingDaysOverride:
    employee_id: int
    working_days: int
    reason: Optional[str] = None

    def to_dict(self) -> dict:
        return {"employee_id": self.employee_id, "working_days": self.working_days, "reason": self.reason}


@dataclass(frozen=True)
class WorkingDaysConfig:
    """Working-day denominator for a month; ``is_custom`` is False when it was counted from the calendar."""

    month: str
    working_days: int
    overrides: Sequence[WorkingDaysOverride] = field(default_factory=tuple)
    notes: Optional[str] = None
    set_by: Optional[int] = None
    is_custom: bool = False

    def for_employee(self, employee_id: int) -> int:
        for o in self.overrides:
            if o.employee_id == employee_id:
                return o.working_days
        return self.working_days

    def to_dict(self) -> dict:
        return {
            "month": self.month,
            "working_days": self.working_days,
            "overrides": [o.to_dict() for o in self.overrides],
            "is_custom": self.is_custom,
            "notes": self.notes,
            "set_by": self.set_by,
        }
