from __future__ import annotations

from datetime import date
from decimal import Decimal

import pytest

from src.hr_operations.hr_operations.core.enums import (
    AttendanceStatus,
    EmployeeType,
    LeaveStatus,
    LeaveType,
    ReimbursementStatus,
    Role,
)
from src.hr_operations.hr_operations.core.exceptions import NotFoundError, ValidationError
from src.hr_operations.hr_operations.leave.model import LeaveRequest
from tests.fakes import NOW, World, make_employee

NEW_YEAR = (date(2025, 1, 1), "New Year")


def _world(*extra, today=date(2025, 2, 3)) -> World:
    return World(
        make_employee(2, role=Role.HR_HEAD, salary="50000"),
        make_employee(4),
        make_employee(5, employee_type=EmployeeType.INTERN, salary="8000"),
        *extra,
        holidays=[NEW_YEAR],
        today=today,
    )


def _unpaid_leave(employee_id: int, start: date, end: date) -> LeaveRequest:
    return LeaveRequest(
        request_id=50,
        employee_id=employee_id,
        leave_type=LeaveType.UNPAID,
        start_date=start,
        end_date=end,
        number_of_days=2,
        reason="Travel",
        status=LeaveStatus.APPROVED,
        created_at=NOW,
    )


def _slip(result, employee_id):
    return next(p for p in result.payslips if p.employee_id == employee_id)


def test_working_days_exclude_weekends_and_holidays():
    assert _world().payroll.working_days_in("2025-01") == 22


def test_generate_applies_absence_deduction():
    w = _world()
    w.attendance_repo.upsert(
        employee_id=4, work_date=date(2025, 1, 7), status=AttendanceStatus.ABSENT_DOUBLE_DEDUCTION, marked_by="2"
    )

    result = w.payroll.generate("2025-01")

    figures = _slip(result, 4).figures
    assert figures.per_day_salary == Decimal("1363.64")
    assert figures.deductions == Decimal("2727.28")
    assert figures.net_pay == Decimal("27272.72")
    assert result.failures == ()


def test_interns_do_not_get_payslips():
    result = _world().payroll.generate("2025-01")

    assert sorted(p.employee_id for p in result.payslips) == [2, 4]
    assert result.count == 2


def test_no_eligible_employees_is_rejected():
    w = World(make_employee(5, employee_type=EmployeeType.INTERN))
    with pytest.raises(ValidationError):
        w.payroll.generate("2025-01")


def test_invalid_month_is_rejected():
    with pytest.raises(ValidationError):
        _world().payroll.generate("2025-13")


def test_generation_is_idempotent():
    w = _world()
    first = w.payroll.generate("2025-01")
    second = w.payroll.generate("2025-01")

    assert _slip(first, 4).figures == _slip(second, 4).figures
    assert _slip(first, 4).payslip_id == _slip(second, 4).payslip_id
    assert len(w.payslips_repo.by_key) == 2


def test_unpaid_leave_counts_days_inside_the_month():
    w = _world()
    w.leaves_repo.add(_unpaid_leave(4, date(2025, 1, 30), date(2025, 2, 2)))

    january = _slip(w.payroll.generate("2025-01"), 4).figures
    february = _slip(w.payroll.generate("2025-02"), 4).figures

    assert january.unpaid_leaves == 2
    assert january.deductions == Decimal("2727.28")
    assert february.unpaid_leaves == 2


def test_rewards_and_payable_reimbursements_are_included():
    w = _world()
    w.compensation.rewards.append((4, date(2025, 1, 15), Decimal("1000")))
    w.compensation.rewards.append((4, date(2025, 2, 1), Decimal("999")))
    w.compensation.reimbursements.append((4, date(2025, 1, 20), Decimal("250"), ReimbursementStatus.APPROVED))
    w.compensation.reimbursements.append((4, date(2025, 1, 21), Decimal("75"), ReimbursementStatus.PENDING))

    figures = _slip(w.payroll.generate("2025-01"), 4).figures

    assert figures.rewards == Decimal("1000.00")
    assert figures.reimbursements == Decimal("250.00")
    assert figures.gross_pay == Decimal("31250.00")


def test_one_failing_employee_does_not_stop_the_batch():
    w = _world()
    real_sum = w.compensation.sum_rewards

    def flaky(employee_id, *, start, end):
        if employee_id == 2:
            raise RuntimeError("rewards table locked")
        return real_sum(employee_id, start=start, end=end)

    w.compensation.sum_rewards = flaky

    result = w.payroll.generate("2025-01")

    assert [p.employee_id for p in result.payslips] == [4]
    assert [(f.employee_id, f.error) for f in result.failures] == [(2, "rewards table locked")]
    assert result.to_dict()["count"] == 1


def test_regenerate_picks_up_new_attendance():
    w = _world()
    original = _slip(w.payroll.generate("2025-01"), 4)
    w.attendance_repo.upsert(
        employee_id=4, work_date=date(2025, 1, 8), status=AttendanceStatus.ABSENT_DOUBLE_DEDUCTION, marked_by="2"
    )

    updated = w.payroll.regenerate(original.payslip_id)

    assert updated.payslip_id == original.payslip_id
    assert updated.figures.unapproved_absences == 1
    assert updated.regenerated_at is not None

    with pytest.raises(NotFoundError):
        w.payroll.regenerate(999)


def test_previous_month_job_skips_existing_month_and_notifies():
    w = _world()

    result = w.payroll.generate_previous_month()

    assert result.month == "2025-01"
    assert sorted(r for r, _, _ in w.gateway.sent) == ["e2@example.com", "e4@example.com"]
    assert w.payroll.generate_previous_month() is None
    assert w.payslips_repo.upserts == 2


def test_get_hides_other_employees_payslips():
    w = _world()
    slip = _slip(w.payroll.generate("2025-01"), 4)

    view = w.payroll.get(slip.payslip_id, employee_id=4)
    assert view["net_pay"] == 30000.0
    assert view["leaveBalance"]["total"] == 39

    with pytest.raises(NotFoundError):
        w.payroll.get(slip.payslip_id, employee_id=2)


def test_my_payslips_flags_interns():
    w = _world()
    w.payroll.generate("2025-01")

    assert w.payroll.my_payslips(5)["isIntern"]
    mine = w.payroll.my_payslips(4, year=2025)
    assert [p["month"] for p in mine["payslips"]] == ["2025-01"]


def test_stats_and_totals():
    w = _world()
    w.payroll.generate("2025-01")

    stats = w.payroll.stats("2025-01")
    listing = w.payroll.list_for_month("2025-01")

    assert stats["employeeCount"] == 2
    assert stats["totalNetPay"] == 80000.0
    assert stats["averageNetPay"] == 40000.0
    assert listing["totals"]["totalGrossPay"] == 80000.0
    assert w.payroll.stats("2024-12")["averageNetPay"] == 0
