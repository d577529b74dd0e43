from __future__ import annotations

from datetime import date

import pytest

from src.hr_operations.hr_operations.core.enums import AttendanceStatus, EmployeeType, LeaveStatus, LeaveType, Role
from src.hr_operations.hr_operations.core.exceptions import (
    AuthorizationError,
    ConflictError,
    InsufficientBalanceError,
    ValidationError,
)
from tests.fakes import World, make_employee

DIRECTOR, HR, MANAGER, EMPLOYEE, INTERN, OTHER_MANAGER = 1, 2, 3, 4, 5, 6


def _world(**kwargs) -> World:
    return World(
        make_employee(DIRECTOR, role=Role.DIRECTOR),
        make_employee(HR, role=Role.HR_HEAD, manager_id=DIRECTOR),
        make_employee(MANAGER, role=Role.MANAGER, manager_id=DIRECTOR),
        make_employee(EMPLOYEE, manager_id=MANAGER, casual=3),
        make_employee(INTERN, employee_type=EmployeeType.INTERN, manager_id=MANAGER),
        make_employee(OTHER_MANAGER, role=Role.MANAGER, manager_id=DIRECTOR),
        **kwargs,
    )


def _submit(w: World, start: date, end: date, leave_type=LeaveType.SICK, employee_id=EMPLOYEE):
    return w.workflow.submit(
        employee_id=employee_id,
        leave_type=leave_type,
        start_date=start,
        end_date=end,
        reason="Family matters",
    )


def test_submit_counts_working_days_without_weekends_and_holidays():
    w = _world(holidays=[(date(2025, 1, 8), "Founders Day")])

    # Mon 6 .. Sun 12, Wednesday 8 is a holiday
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 12))

    assert leave.number_of_days == 4
    assert leave.status == LeaveStatus.PENDING_MANAGER
    assert leave.is_paid
    assert [r for r, _, _ in w.gateway.sent] == ["e3@example.com"]


def test_submit_rejected_when_balance_is_short():
    w = _world()

    with pytest.raises(InsufficientBalanceError) as exc:
        _submit(w, date(2025, 1, 6), date(2025, 1, 10), LeaveType.CASUAL)

    assert exc.value.available == 3
    assert exc.value.requested == 5
    assert w.leaves_repo.by_id == {}


def test_intern_can_only_apply_for_unpaid_leave():
    w = _world()

    with pytest.raises(ValidationError):
        _submit(w, date(2025, 1, 6), date(2025, 1, 6), LeaveType.CASUAL, employee_id=INTERN)

    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6), LeaveType.UNPAID, employee_id=INTERN)
    assert not leave.is_paid


def test_overlapping_submission_is_rejected():
    w = _world()
    _submit(w, date(2025, 1, 10), date(2025, 1, 12))

    with pytest.raises(ConflictError):
        _submit(w, date(2025, 1, 12), date(2025, 1, 14))


def test_rejected_leave_does_not_block_a_new_submission():
    w = _world()
    first = _submit(w, date(2025, 1, 6), date(2025, 1, 7))
    w.workflow.reject(request_id=first.request_id, approver_id=MANAGER, reason="Busy week")

    second = _submit(w, date(2025, 1, 7), date(2025, 1, 8))
    assert second.status == LeaveStatus.PENDING_MANAGER


@pytest.mark.parametrize(
    "start,end,reason",
    [
        (date(2025, 1, 11), date(2025, 1, 12), "Weekend only"),
        (date(2025, 1, 10), date(2025, 1, 6), "Backwards"),
        (date(2025, 1, 6), date(2025, 1, 6), "   "),
    ],
)
def test_submit_validation_errors(start, end, reason):
    w = _world()
    with pytest.raises(ValidationError):
        w.workflow.submit(employee_id=EMPLOYEE, leave_type=LeaveType.SICK, start_date=start, end_date=end, reason=reason)


def test_manager_approval_moves_to_hr_without_touching_balance():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 7), LeaveType.CASUAL)

    approved = w.workflow.approve(request_id=leave.request_id, approver_id=MANAGER)

    assert approved.status == LeaveStatus.PENDING_HR
    assert approved.manager_approved
    assert w.employee(EMPLOYEE).casual_leave_balance == 3
    assert w.attendance_repo.by_key == {}


def test_only_the_assigned_manager_can_approve():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 7))

    with pytest.raises(AuthorizationError):
        w.workflow.approve(request_id=leave.request_id, approver_id=OTHER_MANAGER)


def test_manager_cannot_give_final_approval():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 7))
    w.workflow.approve(request_id=leave.request_id, approver_id=MANAGER)

    with pytest.raises(AuthorizationError):
        w.workflow.approve(request_id=leave.request_id, approver_id=MANAGER)


def test_hr_approval_debits_exact_days_and_backfills_attendance():
    w = _world()
    leave = _submit(w, date(2025, 1, 9), date(2025, 1, 13), LeaveType.CASUAL)  # Thu..Mon -> 3 days
    w.workflow.approve(request_id=leave.request_id, approver_id=MANAGER)

    final = w.workflow.approve(request_id=leave.request_id, approver_id=HR)

    assert final.status == LeaveStatus.APPROVED
    assert final.hr_approved
    assert w.employee(EMPLOYEE).casual_leave_balance == 0
    marked = w.attendance_repo.list_for_employee(EMPLOYEE, start=date(2025, 1, 9), end=date(2025, 1, 13))
    assert [r.work_date for r in marked] == [date(2025, 1, 9), date(2025, 1, 10), date(2025, 1, 13)]
    assert {r.status for r in marked} == {AttendanceStatus.PAID_LEAVE}
    assert {r.marked_by for r in marked} == {"SYSTEM"}


def test_hr_can_approve_directly_from_pending_manager():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6), LeaveType.EARNED)

    final = w.workflow.approve(request_id=leave.request_id, approver_id=DIRECTOR)

    assert final.status == LeaveStatus.APPROVED
    assert not final.manager_approved
    assert w.employee(EMPLOYEE).earned_leave_balance == 14


def test_final_approval_rechecks_balance_and_never_goes_negative():
    w = _world()
    first = _submit(w, date(2025, 1, 6), date(2025, 1, 8), LeaveType.CASUAL)
    second = _submit(w, date(2025, 1, 13), date(2025, 1, 15), LeaveType.CASUAL)

    w.workflow.approve(request_id=first.request_id, approver_id=HR)
    with pytest.raises(InsufficientBalanceError):
        w.workflow.approve(request_id=second.request_id, approver_id=HR)

    assert w.employee(EMPLOYEE).casual_leave_balance == 0
    assert w.workflow.get(second.request_id).status == LeaveStatus.PENDING_MANAGER


def test_unpaid_leave_approval_leaves_balances_alone():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 7), LeaveType.UNPAID, employee_id=INTERN)

    w.workflow.approve(request_id=leave.request_id, approver_id=HR)

    intern = w.employee(INTERN)
    assert (intern.sick_leave_balance, intern.casual_leave_balance, intern.earned_leave_balance) == (0, 0, 0)
    statuses = {r.status for r in w.attendance_repo.list_for_employee(INTERN, start=date(2025, 1, 6), end=date(2025, 1, 7))}
    assert statuses == {AttendanceStatus.UNPAID_LEAVE}


def test_rejection_at_either_stage_never_debits():
    w = _world()
    at_manager = _submit(w, date(2025, 1, 6), date(2025, 1, 6), LeaveType.CASUAL)
    at_hr = _submit(w, date(2025, 1, 7), date(2025, 1, 7), LeaveType.CASUAL)
    w.workflow.approve(request_id=at_hr.request_id, approver_id=MANAGER)

    w.workflow.reject(request_id=at_manager.request_id, approver_id=MANAGER, reason="No cover")
    rejected = w.workflow.reject(request_id=at_hr.request_id, approver_id=HR, reason="Audit week")

    assert rejected.status == LeaveStatus.REJECTED
    assert rejected.rejection_reason == "Audit week"
    assert w.employee(EMPLOYEE).casual_leave_balance == 3


def test_hr_cannot_reject_before_the_manager_decides():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6))

    with pytest.raises(ConflictError):
        w.workflow.reject(request_id=leave.request_id, approver_id=HR, reason="No")


def test_processed_request_cannot_be_decided_again():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6))
    w.workflow.approve(request_id=leave.request_id, approver_id=HR)

    with pytest.raises(ConflictError):
        w.workflow.approve(request_id=leave.request_id, approver_id=HR)
    with pytest.raises(ConflictError):
        w.workflow.reject(request_id=leave.request_id, approver_id=HR, reason="Too late")
    assert w.employee(EMPLOYEE).sick_leave_balance == 11


def test_approver_cannot_decide_own_request():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6), employee_id=HR)

    with pytest.raises(AuthorizationError):
        w.workflow.approve(request_id=leave.request_id, approver_id=HR)


def test_cancel_pending_hr_request_removes_it():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6))
    w.workflow.approve(request_id=leave.request_id, approver_id=MANAGER)

    w.workflow.cancel(request_id=leave.request_id, employee_id=EMPLOYEE)

    assert w.leaves_repo.get(leave.request_id) is None


def test_cancel_approved_request_fails():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6))
    w.workflow.approve(request_id=leave.request_id, approver_id=HR)

    with pytest.raises(ConflictError):
        w.workflow.cancel(request_id=leave.request_id, employee_id=EMPLOYEE)
    assert w.workflow.get(leave.request_id).status == LeaveStatus.APPROVED


def test_only_owner_can_cancel():
    w = _world()
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6))

    with pytest.raises(AuthorizationError):
        w.workflow.cancel(request_id=leave.request_id, employee_id=MANAGER)


def test_backfill_failure_does_not_undo_approval():
    w = _world()
    w.attendance_repo.fail_inserts = True
    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 7), LeaveType.CASUAL)

    final = w.workflow.approve(request_id=leave.request_id, approver_id=HR)

    assert final.status == LeaveStatus.APPROVED
    assert w.employee(EMPLOYEE).casual_leave_balance == 1


def test_notification_failure_does_not_block_submission():
    w = _world()
    w.gateway.fail = True

    leave = _submit(w, date(2025, 1, 6), date(2025, 1, 6))

    assert leave.status == LeaveStatus.PENDING_MANAGER


def test_pending_queues():
    w = _world()
    a = _submit(w, date(2025, 1, 6), date(2025, 1, 6))
    b = _submit(w, date(2025, 1, 7), date(2025, 1, 7))
    w.workflow.approve(request_id=b.request_id, approver_id=MANAGER)

    assert [l.request_id for l in w.workflow.pending_for_manager(MANAGER)] == [a.request_id]
    assert [l.request_id for l in w.workflow.pending_for_hr()] == [b.request_id]
    assert w.workflow.pending_for_manager(OTHER_MANAGER) == []
