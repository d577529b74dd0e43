from __future__ import annotations

from datetime import date

from src.hr_operations.hr_operations.core.enums import EmployeeType, LeaveStatus, LeaveType, Role
from src.hr_operations.hr_operations.leave.model import LeaveRequest
from tests.fakes import NOW, World, make_employee

HR, MANAGER, EMPLOYEE, INTERN = 2, 3, 4, 5


def _world() -> World:
    return World(
        make_employee(HR, role=Role.HR_HEAD, sick=10, casual=10, earned=10),
        make_employee(MANAGER, role=Role.MANAGER, sick=12, casual=12, earned=12),
        make_employee(EMPLOYEE, manager_id=MANAGER, sick=2, casual=3, earned=4),
        make_employee(INTERN, employee_type=EmployeeType.INTERN, manager_id=MANAGER),
    )


def _leave(request_id, employee_id, leave_type, start, end, days, status=LeaveStatus.APPROVED) -> LeaveRequest:
    return LeaveRequest(
        request_id=request_id,
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        number_of_days=days,
        reason="Personal",
        status=status,
        created_at=NOW,
    )


def test_report_counts_only_leave_inside_the_period():
    w = _world()
    w.leaves_repo.add(_leave(1, EMPLOYEE, LeaveType.SICK, date(2025, 1, 6), date(2025, 1, 7), 2))
    w.leaves_repo.add(_leave(2, EMPLOYEE, LeaveType.CASUAL, date(2025, 1, 13), date(2025, 1, 13), 1))
    # Straddles the month boundary.
    w.leaves_repo.add(_leave(3, EMPLOYEE, LeaveType.EARNED, date(2025, 1, 31), date(2025, 2, 3), 2))
    w.leaves_repo.add(_leave(4, MANAGER, LeaveType.EARNED, date(2025, 1, 20), date(2025, 1, 20), 1))
    w.leaves_repo.add(
        _leave(5, MANAGER, LeaveType.SICK, date(2025, 1, 21), date(2025, 1, 22), 2, status=LeaveStatus.REJECTED)
    )

    report = w.analytics.leave_report(2025, 1)

    assert report["period"] == {"year": 2025, "month": 1}
    assert report["generatedAt"] == "2025-01-06T09:00:00"
    assert report["employeeCount"] == 4
    assert [r["employee_id"] for r in report["report"]] == [EMPLOYEE, MANAGER, HR, INTERN]

    top = report["report"][0]
    assert top["leavesTaken"] == {"sick": 2, "casual": 1, "earned": 0, "total": 3}
    assert top["balanceRemaining"] == {"sick": 2, "casual": 3, "earned": 4, "total": 9}
    assert top["leaveCount"] == 2


def test_yearly_report_includes_cross_month_leave():
    w = _world()
    w.leaves_repo.add(_leave(3, EMPLOYEE, LeaveType.EARNED, date(2025, 1, 31), date(2025, 2, 3), 2))

    row = w.analytics.leave_report(2025)["report"][0]

    assert row["employee_id"] == EMPLOYEE
    assert row["leavesTaken"]["earned"] == 2


def test_stats_group_approved_leave_by_role():
    w = _world()
    w.leaves_repo.add(_leave(1, EMPLOYEE, LeaveType.SICK, date(2025, 1, 6), date(2025, 1, 7), 2))
    w.leaves_repo.add(_leave(2, EMPLOYEE, LeaveType.CASUAL, date(2025, 3, 3), date(2025, 3, 5), 3))
    w.leaves_repo.add(_leave(3, INTERN, LeaveType.UNPAID, date(2025, 3, 3), date(2025, 3, 3), 1))
    w.leaves_repo.add(
        _leave(4, MANAGER, LeaveType.SICK, date(2025, 1, 21), date(2025, 1, 22), 2, status=LeaveStatus.PENDING_HR)
    )

    stats = {s["role"]: s for s in w.analytics.leave_stats_by_role()}

    assert list(stats) == ["EMPLOYEE", "MANAGER", "HR_HEAD", "DIRECTOR"]
    assert stats["EMPLOYEE"] == {
        "role": "EMPLOYEE",
        "totalEmployees": 2,
        "totalLeavesTaken": 6,
        "avgLeaveBalance": 4.5,
        "leavesByType": {"sick": 1, "casual": 1, "earned": 0},
    }
    assert stats["MANAGER"]["totalLeavesTaken"] == 0
    assert stats["MANAGER"]["avgLeaveBalance"] == 36
    assert stats["DIRECTOR"]["totalEmployees"] == 0
    assert stats["DIRECTOR"]["avgLeaveBalance"] == 0
