from __future__ import annotations

from datetime import date, timedelta
from decimal import Decimal

import pytest

from src.hr_operations.hr_operations.core.enums import AttendanceStatus, EmployeeType, Role
from src.hr_operations.hr_operations.core.exceptions import NotFoundError, ValidationError
from tests.fakes import World, make_employee

NEW_YEAR = (date(2025, 1, 1), "New Year")


def _world(*extra, streak=0) -> World:
    return World(
        make_employee(2, role=Role.HR_HEAD, salary="50000"),
        make_employee(4, streak=streak),
        make_employee(5, employee_type=EmployeeType.INTERN, salary="8000"),
        *extra,
        holidays=[NEW_YEAR],
        today=date(2025, 2, 3),
    )


def _mark_weekdays(w: World, employee_id: int, start: date, count: int, status=AttendanceStatus.PRESENT) -> None:
    day = start
    while count:
        if day.weekday() < 5:
            w.attendance_repo.upsert(employee_id=employee_id, work_date=day, status=status, marked_by="SYSTEM")
            count -= 1
        day += timedelta(days=1)


def _slip(result, employee_id):
    return next(p for p in result.payslips if p.employee_id == employee_id)


def test_config_falls_back_to_the_calendar():
    config = _world().payroll.working_days_config("2025-01")

    assert (config.working_days, config.is_custom, config.overrides) == (22, False, ())
    assert config.for_employee(4) == 22


def test_generation_uses_custom_days_and_overrides():
    w = _world()
    saved = w.payroll.set_working_days(
        "2025-01",
        20,
        overrides=[{"employee_id": 4, "working_days": 10, "reason": "Joined mid-month"}],
        notes=" Office closed for relocation ",
        set_by=2,
    )

    assert saved.to_dict() == {
        "month": "2025-01",
        "working_days": 20,
        "overrides": [{"employee_id": 4, "working_days": 10, "reason": "Joined mid-month"}],
        "is_custom": True,
        "notes": "Office closed for relocation",
        "set_by": 2,
    }
    assert w.payroll.working_days_config("2025-01").is_custom

    result = w.payroll.generate("2025-01")

    assert _slip(result, 2).figures.working_days == 20
    assert _slip(result, 2).figures.per_day_salary == Decimal("2500.00")
    assert _slip(result, 4).figures.working_days == 10
    assert _slip(result, 4).figures.per_day_salary == Decimal("3000.00")


def test_regenerate_applies_a_later_override():
    w = _world()
    slip = _slip(w.payroll.generate("2025-01"), 4)
    assert slip.figures.working_days == 22

    w.payroll.set_working_days("2025-01", 22, overrides=[{"employee_id": 4, "working_days": 15}], set_by=2)

    assert w.payroll.regenerate(slip.payslip_id).figures.working_days == 15


@pytest.mark.parametrize(
    "month, working_days, overrides",
    [
        ("2025-13", 20, ()),
        ("2025-02", -1, ()),
        ("2025-02", 29, ()),
        ("2025-02", "twenty", ()),
        ("2025-02", None, ()),
        ("2025-02", 20, [{"employee_id": 4, "working_days": 40}]),
        ("2025-02", 20, [{"employee_id": 4, "working_days": 5}, {"employee_id": 4, "working_days": 6}]),
        ("2025-02", 20, ["4:5"]),
    ],
)
def test_set_working_days_validates_input(month, working_days, overrides):
    w = _world()
    with pytest.raises(ValidationError):
        w.payroll.set_working_days(month, working_days, overrides=overrides, set_by=2)
    assert w.working_days_repo.by_month == {}


def test_override_for_unknown_employee_is_rejected():
    w = _world()
    with pytest.raises(NotFoundError):
        w.payroll.set_working_days("2025-02", 20, overrides=[{"employee_id": 404, "working_days": 5}], set_by=2)


def test_accrual_carries_the_streak_across_months():
    w = _world(streak=10)
    _mark_weekdays(w, 4, date(2025, 1, 2), 12)

    outcome = w.payroll.process_earned_leave_accrual("2025-01")

    assert outcome == {
        "month": "2025-01",
        "processedEmployees": 2,
        "accruals": [{"employee_id": 4, "accrued": 1}],
        "totalAccrued": 1,
    }
    assert w.employee(4).earned_leave_balance == 16
    assert w.employee(4).consecutive_working_days == 2
    assert w.employee(5).earned_leave_balance == 0


def test_absence_breaks_the_streak_before_it_pays_out():
    w = _world(streak=15)
    _mark_weekdays(w, 4, date(2025, 1, 2), 3)
    w.attendance_repo.upsert(
        employee_id=4, work_date=date(2025, 1, 7), status=AttendanceStatus.ABSENT, marked_by="SYSTEM"
    )
    _mark_weekdays(w, 4, date(2025, 1, 8), 4)

    assert w.payroll.process_earned_leave_accrual("2025-01")["totalAccrued"] == 0
    assert w.employee(4).consecutive_working_days == 4
    assert w.employee(4).earned_leave_balance == 15


def test_accrual_does_not_double_count_a_month():
    w = _world(streak=19)
    _mark_weekdays(w, 4, date(2025, 1, 2), 1)

    assert w.payroll.process_earned_leave_accrual("2025-01")["totalAccrued"] == 1
    again = w.payroll.process_earned_leave_accrual("2025-01")

    assert (again["processedEmployees"], again["totalAccrued"]) == (0, 0)
    assert w.employee(4).earned_leave_balance == 16


def test_previous_month_job_runs_accrual_after_generation():
    w = _world(streak=19)
    _mark_weekdays(w, 4, date(2025, 1, 2), 1)

    result = w.payroll.generate_previous_month()

    assert result.month == "2025-01"
    assert w.employee(4).earned_leave_balance == 16
    assert w.employee(4).last_accrual_month == "2025-01"
