from __future__ import annotations

from decimal import ROUND_HALF_UP, Decimal

from ...core.constants import WORKED_DAY_WEIGHTS
from ...core.enums import AttendanceStatus
from ..model import PayslipFigures, PayslipInputs
from .base import PayslipCalculator

CENT = Decimal("0.01")
ZERO = Decimal("0")


def round_money(value: Decimal) -> Decimal:
    return value.quantize(CENT, rounding=ROUND_HALF_UP)


class StandardPayslipCalculator(PayslipCalculator):
    """Standard rule.

    per day = base / working days, rounded to cents (0 without working days).
    Deductions: unpaid leave days x per day, unapproved absences x per day x 2,
    holiday sandwich x per day. A plain ABSENT costs nothing beyond not being
    counted as worked.
    """

    ABSENCE_MULTIPLIER = 2

    def holiday_sandwich(self, inputs: PayslipInputs) -> int:
        # Reserved deduction category; always 0.
        return 0

    def calculate(self, inputs: PayslipInputs) -> PayslipFigures:
        base = round_money(Decimal(inputs.base_salary))
        per_day = round_money(base / inputs.working_days) if inputs.working_days > 0 else ZERO

        actual = sum((WORKED_DAY_WEIGHTS.get(s, ZERO) for s in inputs.attendance), ZERO)
        absences = sum(1 for s in inputs.attendance if s == AttendanceStatus.ABSENT_DOUBLE_DEDUCTION)
        sandwich = self.holiday_sandwich(inputs)
        unpaid = int(inputs.unpaid_leave_days)

        deductions = round_money(
            unpaid * per_day + absences * per_day * self.ABSENCE_MULTIPLIER + sandwich * per_day
        )
        rewards = round_money(Decimal(inputs.rewards))
        reimbursements = round_money(Decimal(inputs.reimbursements))
        gross = base + rewards + reimbursements

        return PayslipFigures(
            base_salary=base,
            working_days=int(inputs.working_days),
            per_day_salary=per_day,
            actual_working_days=actual,
            unpaid_leaves=unpaid,
            unapproved_absences=absences,
            holiday_sandwich=sandwich,
            rewards=rewards,
            reimbursements=reimbursements,
            gross_pay=gross,
            deductions=deductions,
            net_pay=gross - deductions,
        )
