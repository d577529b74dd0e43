from __future__ import annotations

import pytest

from src.hr_operations.hr_operations.balances.model import accrue_streak
from src.hr_operations.hr_operations.core.enums import AttendanceStatus, EmployeeType, LeaveType
from src.hr_operations.hr_operations.core.exceptions import (
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from src.hr_operations.hr_operations.settings.model import CompanySettings, LeavePolicy
from src.hr_operations.hr_operations.settings.provider import StaticSettingsProvider
from src.hr_operations.hr_operations.balances.service import BalanceLedger
from tests.fakes import InMemoryBalances, InMemoryEmployees, World, make_employee


def test_balance_total():
    w = World(make_employee(4, sick=2, casual=3, earned=4))
    balance = w.ledger.get_balance(4)

    assert balance.to_dict() == {"sick": 2, "casual": 3, "earned": 4, "total": 9}
    with pytest.raises(NotFoundError):
        w.ledger.get_balance(404)


def test_debit_decrements_and_never_goes_negative():
    w = World(make_employee(4, earned=5))
    w.ledger.debit(4, LeaveType.EARNED, 5)
    assert w.employee(4).earned_leave_balance == 0

    with pytest.raises(InsufficientBalanceError) as err:
        w.ledger.debit(4, LeaveType.EARNED, 1)
    assert (err.value.available, err.value.requested) == (0, 1)
    assert w.employee(4).earned_leave_balance == 0


def test_unpaid_debit_is_a_no_op():
    w = World(make_employee(4))
    w.ledger.debit(4, LeaveType.UNPAID, 3)
    assert w.ledger.get_balance(4).total == 39


def test_interns_cannot_be_debited():
    w = World(make_employee(5, employee_type=EmployeeType.INTERN))
    with pytest.raises(ValidationError):
        w.ledger.debit(5, LeaveType.SICK, 1)


def test_debit_requires_positive_days():
    w = World(make_employee(4))
    with pytest.raises(ValidationError):
        w.ledger.debit(4, LeaveType.SICK, 0)


def test_initialize_and_reset_follow_the_policy():
    employees = InMemoryEmployees(
        make_employee(4, sick=0, casual=1, earned=2),
        make_employee(5, employee_type=EmployeeType.INTERN),
    )
    settings = StaticSettingsProvider(CompanySettings(leave_policy=LeavePolicy(sick=10, casual=8, earned=20)))
    ledger = BalanceLedger(employees, InMemoryBalances(employees), settings)

    assert ledger.initialize_employee(5).total == 0
    assert ledger.initialize_employee(4).to_dict() == {"sick": 10, "casual": 8, "earned": 20, "total": 38}

    employees.by_id[4] = make_employee(4, sick=1, casual=1, earned=1)
    outcome = ledger.reset_all()

    assert outcome == {"employees_updated": 1, "leave_policy": {"sick": 10, "casual": 8, "earned": 20}}
    assert ledger.get_balance(4).total == 38
    assert ledger.get_balance(5).total == 0


def test_list_balances_skips_interns():
    w = World(make_employee(4), make_employee(5, employee_type=EmployeeType.INTERN))
    assert [row["employee_id"] for row in w.ledger.list_balances()] == [4]
    assert w.ledger.list_balances()[0]["consecutive_working_days"] == 0


def test_adjust_adds_and_subtracts_days():
    w = World(make_employee(4, casual=3))

    outcome = w.ledger.adjust(4, LeaveType.CASUAL, 2, " Carry-over from 2024 ")
    assert outcome == {
        "employee_id": 4,
        "employee_name": "Employee 4",
        "leave_type": "CASUAL",
        "previous_balance": 3,
        "adjustment": 2,
        "new_balance": 5,
        "reason": "Carry-over from 2024",
    }

    w.ledger.adjust(4, LeaveType.CASUAL, -5, "Correction")
    assert w.employee(4).casual_leave_balance == 0


def test_adjust_rejects_a_negative_result():
    w = World(make_employee(4, sick=1))
    with pytest.raises(ValidationError, match="negative balance. Current: 1, Adjustment: -2"):
        w.ledger.adjust(4, LeaveType.SICK, -2, "Correction")
    assert w.employee(4).sick_leave_balance == 1


@pytest.mark.parametrize(
    "leave_type, adjustment, reason",
    [
        (LeaveType.UNPAID, 1, "x"),
        (LeaveType.SICK, 0, "x"),
        (LeaveType.SICK, 1.5, "x"),
        (LeaveType.SICK, True, "x"),
        (LeaveType.SICK, 1, "  "),
        (LeaveType.SICK, 1, None),
    ],
)
def test_adjust_validates_input(leave_type, adjustment, reason):
    w = World(make_employee(4))
    with pytest.raises(ValidationError):
        w.ledger.adjust(4, leave_type, adjustment, reason)


def test_adjust_refuses_interns_and_unknown_employees():
    w = World(make_employee(5, employee_type=EmployeeType.INTERN))
    with pytest.raises(ValidationError):
        w.ledger.adjust(5, LeaveType.SICK, 1, "Goodwill")
    with pytest.raises(NotFoundError):
        w.ledger.adjust(404, LeaveType.SICK, 1, "Goodwill")


P = AttendanceStatus.PRESENT


def test_streak_earns_a_day_every_twenty_worked_days():
    assert accrue_streak(0, [P] * 20) == (1, 0)
    assert accrue_streak(0, [P] * 45) == (2, 5)
    assert accrue_streak(15, [P] * 5) == (1, 0)
    assert accrue_streak(0, [AttendanceStatus.HALF_DAY, AttendanceStatus.PAID_LEAVE] * 10) == (1, 0)


def test_absence_resets_the_streak_and_holidays_do_not():
    assert accrue_streak(18, [AttendanceStatus.ABSENT, P]) == (0, 1)
    assert accrue_streak(18, [AttendanceStatus.ABSENT_DOUBLE_DEDUCTION]) == (0, 0)
    assert accrue_streak(
        18, [P, AttendanceStatus.OFFICIAL_HOLIDAY, AttendanceStatus.UNPAID_LEAVE, P]
    ) == (1, 0)


def test_accrual_is_applied_once_per_month():
    w = World(make_employee(4, earned=3, streak=19))

    assert w.ledger.accrue_earned_leave(w.employee(4), "2025-01", [P, P]) == 1
    assert (w.employee(4).earned_leave_balance, w.employee(4).consecutive_working_days) == (4, 1)

    assert w.ledger.accrue_earned_leave(w.employee(4), "2025-01", [P] * 20) is None
    assert w.employee(4).earned_leave_balance == 4
