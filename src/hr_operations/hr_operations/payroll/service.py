from __future__ import annotations

import logging
from calendar import monthrange
from concurrent.futures import ThreadPoolExecutor
from datetime import date
from decimal import ROUND_HALF_UP, Decimal
from typing import Iterable, Mapping, Optional, Sequence

from ..attendance.repository import AttendanceRepository
from ..balances.model import LeaveBalance
from ..balances.service import BalanceLedger
from ..common.datetime_utils import (
    Clock,
    SystemClock,
    month_bounds,
    month_key,
    overlap_days,
    parse_month_key,
    previous_month,
)
from ..common.validators import optional_text, require_non_negative_int
from ..core.constants import DEFAULT_PAYROLL_WORKERS, PAYABLE_REIMBURSEMENT_STATUSES
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..holidays.calendar import WorkingCalendar
from ..leave.repository import LeaveRequestRepository
from ..notifications.gateway import NotificationDispatcher
from .calculator.base import PayslipCalculator
from .calculator.standard_calculator import StandardPayslipCalculator
from .model import (
    GenerationResult,
    Payslip,
    PayslipFailure,
    PayslipInputs,
    WorkingDaysConfig,
    WorkingDaysOverride,
)
from .repository import CompensationRepository, PayslipRepository, WorkingDaysRepository

log = logging.getLogger(__name__)


def _total(payslips: Sequence[Payslip], attr: str) -> float:
    return float(sum((getattr(p.figures, attr) for p in payslips), Decimal("0")))


class PayrollService:
    """Monthly payslip generation.

    A payslip is a pure function of stored state (salary, attendance, approved
    unpaid leave, rewards, reimbursements, holidays) at call time, upserted per
    (employee, month).
    """

    def __init__(
        self,
        payslips: PayslipRepository,
        compensation: CompensationRepository,
        employees: EmployeeRepository,
        attendance: AttendanceRepository,
        leaves: LeaveRequestRepository,
        calendar: WorkingCalendar,
        notifier: NotificationDispatcher,
        working_days: WorkingDaysRepository,
        ledger: BalanceLedger,
        *,
        calculator: Optional[PayslipCalculator] = None,
        clock: Optional[Clock] = None,
        max_workers: int = DEFAULT_PAYROLL_WORKERS,
    ):
        self._payslips = payslips
        self._compensation = compensation
        self._employees = employees
        self._attendance = attendance
        self._leaves = leaves
        self._calendar = calendar
        self._notifier = notifier
        self._working_days = working_days
        self._ledger = ledger
        self._calculator = calculator or StandardPayslipCalculator()
        self._clock = clock or SystemClock()
        self._max_workers = max(1, int(max_workers))

    def _inputs_for(self, employee: Employee, first: date, last: date, working_days: int) -> PayslipInputs:
        records = self._attendance.list_for_employee(employee.employee_id, start=first, end=last)
        unpaid = self._leaves.list_approved_overlapping(
            start_date=first,
            end_date=last,
            employee_ids=[employee.employee_id],
            paid=False,
        )
        return PayslipInputs(
            base_salary=employee.salary,
            working_days=working_days,
            attendance=[r.status for r in records],
            unpaid_leave_days=sum(overlap_days(l.start_date, l.end_date, first, last) for l in unpaid),
            rewards=self._compensation.sum_rewards(employee.employee_id, start=first, end=last),
            reimbursements=self._compensation.sum_reimbursements(
                employee.employee_id,
                start=first,
                end=last,
                statuses=PAYABLE_REIMBURSEMENT_STATUSES,
            ),
        )

    def _compute(self, employee: Employee, month: str, working_days: int) -> Payslip:
        year, mon = parse_month_key(month)
        first, last = month_bounds(year, mon)
        figures = self._calculator.calculate(self._inputs_for(employee, first, last, working_days))
        payslip_id = self._payslips.upsert(
            employee_id=employee.employee_id,
            month=month,
            figures=figures,
            regenerated_at=self._clock.now(),
        )
        return self._payslips.get(payslip_id)

    def working_days_in(self, month: str) -> int:
        year, mon = parse_month_key(month)
        first, last = month_bounds(year, mon)
        return self._calendar.count_working_days(first, last)

    # -------- Working-day configuration --------
    def working_days_config(self, month: str) -> WorkingDaysConfig:
        """HR-set figures for ``month``, else the calendar count (``is_custom`` False)."""
        parse_month_key(month)
        config = self._working_days.get(month)
        if config is not None:
            return config
        return WorkingDaysConfig(month=month, working_days=self.working_days_in(month))

    def set_working_days(
        self,
        month: str,
        working_days,
        *,
        overrides: Iterable[Mapping] = (),
        notes: Optional[str] = None,
        set_by: Optional[int] = None,
    ) -> WorkingDaysConfig:
        year, mon = parse_month_key(month)
        days_in_month = monthrange(year, mon)[1]

        def _days(value, field_name: str) -> int:
            days = require_non_negative_int(value, field_name)
            if days > days_in_month:
                raise ValidationError(f"{field_name} cannot exceed {days_in_month} for {month}")
            return days

        default = _days(working_days, "working_days")
        parsed = []
        seen = set()
        for raw in overrides or ():
            if not isinstance(raw, Mapping):
                raise ValidationError("Each override must be an object")
            employee_id = require_non_negative_int(raw.get("employee_id"), "employee_id")
            if employee_id in seen:
                raise ValidationError(f"Duplicate override for employee {employee_id}")
            if not self._employees.get_by_id(employee_id):
                raise NotFoundError(f"Employee {employee_id} not found")
            seen.add(employee_id)
            parsed.append(
                WorkingDaysOverride(
                    employee_id=employee_id,
                    working_days=_days(raw.get("working_days"), "override working_days"),
                    reason=optional_text(raw.get("reason")),
                )
            )

        notes = optional_text(notes)
        self._working_days.save(month=month, working_days=default, overrides=parsed, notes=notes, set_by=set_by)
        log.info("Working days for %s set to %s (%s override(s)) by %s", month, default, len(parsed), set_by)
        return WorkingDaysConfig(
            month=month,
            working_days=default,
            overrides=tuple(parsed),
            notes=notes,
            set_by=set_by,
            is_custom=True,
        )

    # -------- Generation --------
    def generate(self, month: str) -> GenerationResult:
        parse_month_key(month)
        employees = self._employees.list_active(full_time_only=True)
        if not employees:
            raise ValidationError("No eligible full-time employees found")

        config = self.working_days_config(month)
        log.info(
            "Payslip generation for %s started: %s employee(s), %s working day(s)%s",
            month,
            len(employees),
            config.working_days,
            " (custom)" if config.is_custom else "",
        )

        def _one(employee: Employee):
            try:
                return self._compute(employee, month, config.for_employee(employee.employee_id)), None
            except Exception as exc:
                log.warning("Payslip for employee %s (%s) failed", employee.employee_id, month, exc_info=True)
                return None, PayslipFailure(employee_id=employee.employee_id, error=str(exc))

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(employees))) as pool:
            outcomes = list(pool.map(_one, employees))

        result = GenerationResult(
            month=month,
            payslips=tuple(p for p, _ in outcomes if p is not None),
            failures=tuple(f for _, f in outcomes if f is not None),
        )
        log.info("Payslip generation for %s finished: %s generated, %s failed", month, result.count, len(result.failures))
        return result

    def regenerate(self, payslip_id: int) -> Payslip:
        existing = self._payslips.get(int(payslip_id))
        if not existing:
            raise NotFoundError("Payslip not found")
        employee = self._employees.get_by_id(existing.employee_id)
        if not employee:
            raise NotFoundError("Employee not found")

        working_days = self.working_days_config(existing.month).for_employee(employee.employee_id)
        payslip = self._compute(employee, existing.month, working_days)
        log.info("Payslip %s (%s, employee %s) regenerated", payslip.payslip_id, payslip.month, employee.employee_id)
        return payslip

    def process_earned_leave_accrual(self, month: str) -> dict:
        """Carry each full-time employee's working-day streak through ``month``.

        Employees already processed for the month are skipped, so re-running is safe.
        """
        year, mon = parse_month_key(month)
        first, last = month_bounds(year, mon)
        accruals = []
        processed = 0
        for employee in self._employees.list_active(full_time_only=True):
            try:
                records = self._attendance.list_for_employee(employee.employee_id, start=first, end=last)
                statuses = [r.status for r in sorted(records, key=lambda r: r.work_date)]
                earned = self._ledger.accrue_earned_leave(employee, month, statuses)
            except Exception:
                log.warning("Earned-leave accrual for employee %s (%s) failed", employee.employee_id, month, exc_info=True)
                continue
            if earned is None:
                continue
            processed += 1
            if earned:
                accruals.append({"employee_id": employee.employee_id, "accrued": earned})

        total = sum(a["accrued"] for a in accruals)
        log.info("Earned-leave accrual for %s: %s employee(s) processed, %s day(s) accrued", month, processed, total)
        return {"month": month, "processedEmployees": processed, "accruals": accruals, "totalAccrued": total}

    def generate_previous_month(self, today: Optional[date] = None) -> Optional[GenerationResult]:
        """Scheduled job: payslips for the month before ``today`` unless they already exist.

        Earned-leave accrual for that month runs after generation.
        """
        year, mon = previous_month(today or self._clock.today())
        month = month_key(year, mon)
        existing = self._payslips.count_for_month(month)
        if existing:
            log.info("Payslips for %s already exist (%s), skipping", month, existing)
            return None

        result = self.generate(month)
        self.process_earned_leave_accrual(month)
        for payslip in result.payslips:
            self._notifier.notify_employee(
                self._employees.get_by_id(payslip.employee_id),
                f"Payslip for {month}",
                f"Your payslip for {month} is ready. Net pay: {payslip.figures.net_pay}",
            )
        return result

    # -------- Queries --------
    def get(self, payslip_id: int, *, employee_id: Optional[int] = None) -> dict:
        payslip = self._payslips.get(int(payslip_id))
        if not payslip or (employee_id is not None and payslip.employee_id != int(employee_id)):
            raise NotFoundError("Payslip not found")

        out = payslip.to_dict()
        employee = self._employees.get_by_id(payslip.employee_id)
        out["leaveBalance"] = (
            LeaveBalance(employee.sick_leave_balance, employee.casual_leave_balance, employee.earned_leave_balance).to_dict()
            if employee
            else None
        )
        return out

    def list_for_month(self, month: str) -> dict:
        parse_month_key(month)
        payslips = self._payslips.list_for_month(month)
        return {
            "month": month,
            "payslips": [p.to_dict() for p in payslips],
            "totals": {
                "totalGrossPay": _total(payslips, "gross_pay"),
                "totalDeductions": _total(payslips, "deductions"),
                "totalNetPay": _total(payslips, "net_pay"),
            },
        }

    def my_payslips(self, employee_id: int, *, year: Optional[int] = None) -> dict:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        if employee.is_intern:
            return {"isIntern": True, "message": "Interns are not eligible for salary slips", "payslips": []}

        payslips = self._payslips.list_for_employee(employee.employee_id, year=year)
        return {
            "isIntern": False,
            "payslips": [p.to_dict() for p in payslips],
            "leaveBalance": LeaveBalance(
                employee.sick_leave_balance, employee.casual_leave_balance, employee.earned_leave_balance
            ).to_dict(),
        }

    def stats(self, month: str) -> dict:
        parse_month_key(month)
        payslips = self._payslips.list_for_month(month)
        count = len(payslips)
        net = sum((p.figures.net_pay for p in payslips), Decimal("0"))
        return {
            "month": month,
            "employeeCount": count,
            "totalBaseSalary": _total(payslips, "base_salary"),
            "totalGrossPay": _total(payslips, "gross_pay"),
            "totalDeductions": _total(payslips, "deductions"),
            "totalNetPay": float(net),
            "totalRewards": _total(payslips, "rewards"),
            "totalReimbursements": _total(payslips, "reimbursements"),
            "averageNetPay": float((net / count).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)) if count else 0,
        }
