from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..balances.service import BalanceLedger
from ..common.datetime_utils import DateLike, as_date
from ..common.events import EventBus
from ..common.pagination import PageRequest, paginated
from ..common.validators import require_date_range, require_non_empty
from ..core.constants import ACTIVE_LEAVE_STATUSES, PENDING_LEAVE_STATUSES
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import AuthorizationError, ConflictError, NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..holidays.calendar import WorkingCalendar
from ..notifications.gateway import NotificationDispatcher
from .events import LEAVE_APPROVED, LeaveApproved
from .model import LeaveFilter, LeaveRequest
from .repository import LeaveRequestRepository

log = logging.getLogger(__name__)

FINAL_APPROVER_ROLES = frozenset({Role.HR_HEAD, Role.DIRECTOR})


class LeaveWorkflow:
    """Leave request state machine.

    PENDING_MANAGER -> PENDING_HR -> APPROVED, REJECTED from either pending
    state. HR / Director may approve straight from PENDING_MANAGER. The balance
    is checked on submission and debited only on final approval, in the same
    transaction as the status change.
    """

    def __init__(
        self,
        leaves: LeaveRequestRepository,
        employees: EmployeeRepository,
        ledger: BalanceLedger,
        calendar: WorkingCalendar,
        events: EventBus,
        notifier: NotificationDispatcher,
    ):
        self._leaves = leaves
        self._employees = employees
        self._ledger = ledger
        self._calendar = calendar
        self._events = events
        self._notifier = notifier

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def get(self, request_id: int) -> LeaveRequest:
        leave = self._leaves.get(int(request_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    # -------- Submission --------
    def submit(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: DateLike,
        end_date: DateLike,
        reason: str,
    ) -> LeaveRequest:
        start, end = as_date(start_date), as_date(end_date)
        require_date_range(start, end)
        reason = require_non_empty(reason, "Reason")

        employee = self._require_employee(employee_id)
        if not employee.is_active:
            raise ValidationError("Inactive employees cannot apply for leave")
        if employee.is_intern and leave_type != LeaveType.UNPAID:
            raise ValidationError("Interns can only apply for unpaid leave")

        days = self._calendar.count_working_days(start, end)
        if days <= 0:
            raise ValidationError("No working days in the selected range")

        clash = self._leaves.find_overlapping(
            employee_id=employee.employee_id,
            start_date=start,
            end_date=end,
            statuses=ACTIVE_LEAVE_STATUSES,
        )
        if clash:
            raise ConflictError("You already have a leave request for overlapping dates")

        self._ledger.ensure_sufficient(employee, leave_type, days)

        request_id = self._leaves.create_pending(
            employee_id=employee.employee_id,
            leave_type=leave_type,
            start_date=start,
            end_date=end,
            number_of_days=days,
            reason=reason,
        )
        leave = self.get(request_id)
        log.info(
            "Leave %s submitted by employee %s: %s %s..%s (%s day(s))",
            request_id,
            employee.employee_id,
            leave_type.value,
            start,
            end,
            days,
        )

        subject = f"Leave request from {employee.full_name}"
        message = (
            f"{employee.full_name} applied for {days} day(s) of {leave_type.value} leave "
            f"from {start.isoformat()} to {end.isoformat()}.\nReason: {reason}"
        )
        if employee.manager_id:
            self._notifier.notify_employee(self._employees.get_by_id(employee.manager_id), subject, message)
        else:
            self._notify_hr(subject, message)
        return leave

    # -------- Decisions --------
    def approve(self, *, request_id: int, approver_id: int) -> LeaveRequest:
        leave = self.get(request_id)
        approver = self._require_employee(approver_id)
        employee = self._require_employee(leave.employee_id)
        self._ensure_open(leave, approver)

        if approver.role in FINAL_APPROVER_ROLES:
            return self._approve_final(leave, employee, approver)
        if leave.status == LeaveStatus.PENDING_MANAGER and employee.manager_id == approver.employee_id:
            return self._approve_as_manager(leave, employee, approver)
        if leave.status == LeaveStatus.PENDING_HR:
            raise AuthorizationError("Only HR or a Director can give the final approval")
        raise AuthorizationError("You are not the manager of this employee")

    def reject(self, *, request_id: int, approver_id: int, reason: str) -> LeaveRequest:
        leave = self.get(request_id)
        approver = self._require_employee(approver_id)
        employee = self._require_employee(leave.employee_id)
        reason = require_non_empty(reason, "Rejection reason")
        self._ensure_open(leave, approver)

        if leave.status == LeaveStatus.PENDING_MANAGER:
            if employee.manager_id != approver.employee_id:
                if approver.role in FINAL_APPROVER_ROLES:
                    raise ConflictError("Leave request is still awaiting the manager decision")
                raise AuthorizationError("You are not the manager of this employee")
        elif approver.role not in FINAL_APPROVER_ROLES:
            raise AuthorizationError("Only HR or a Director can reject at this stage")

        if not self._leaves.transition(
            request_id=leave.request_id,
            from_statuses=(leave.status,),
            to_status=LeaveStatus.REJECTED,
            rejection_reason=reason,
        ):
            raise ConflictError("Leave request has already been processed")

        log.info("Leave %s rejected by %s at %s", leave.request_id, approver.employee_id, leave.status.value)
        self._notifier.notify_employee(
            employee,
            "Leave request rejected",
            f"Your {leave.leave_type.value} leave from {leave.start_date.isoformat()} to "
            f"{leave.end_date.isoformat()} was rejected.\nReason: {reason}",
        )
        return self.get(leave.request_id)

    def cancel(self, *, request_id: int, employee_id: int) -> None:
        leave = self.get(request_id)
        if leave.employee_id != int(employee_id):
            raise AuthorizationError("You can only cancel your own leave requests")
        if leave.status not in PENDING_LEAVE_STATUSES:
            raise ConflictError("Only pending leave requests can be cancelled")
        if not self._leaves.delete_pending(request_id=leave.request_id, statuses=PENDING_LEAVE_STATUSES):
            raise ConflictError("Leave request has already been processed")
        log.info("Leave %s cancelled by employee %s", leave.request_id, leave.employee_id)

    @staticmethod
    def _ensure_open(leave: LeaveRequest, approver: Employee) -> None:
        if leave.status not in PENDING_LEAVE_STATUSES:
            raise ConflictError("Leave request has already been processed")
        if leave.employee_id == approver.employee_id:
            raise AuthorizationError("You cannot decide on your own leave request")

    def _approve_as_manager(self, leave: LeaveRequest, employee: Employee, approver: Employee) -> LeaveRequest:
        if not self._leaves.transition(
            request_id=leave.request_id,
            from_statuses=(LeaveStatus.PENDING_MANAGER,),
            to_status=LeaveStatus.PENDING_HR,
            manager_approved=True,
        ):
            raise ConflictError("Leave request has already been processed")

        log.info("Leave %s approved by manager %s", leave.request_id, approver.employee_id)
        self._notifier.notify_employee(
            employee,
            "Leave approved by manager",
            f"Your {leave.leave_type.value} leave from {leave.start_date.isoformat()} to "
            f"{leave.end_date.isoformat()} was approved by your manager and is awaiting HR approval.",
        )
        self._notify_hr(
            f"Leave pending HR approval: {employee.full_name}",
            f"{employee.full_name}'s {leave.leave_type.value} leave ({leave.number_of_days} day(s)) "
            f"from {leave.start_date.isoformat()} to {leave.end_date.isoformat()} needs your approval.",
        )
        return self.get(leave.request_id)

    def _approve_final(self, leave: LeaveRequest, employee: Employee, approver: Employee) -> LeaveRequest:
        self._ledger.ensure_sufficient(employee, leave.leave_type, leave.number_of_days)
        self._leaves.approve_final(
            request_id=leave.request_id,
            from_statuses=PENDING_LEAVE_STATUSES,
            employee_id=employee.employee_id,
            leave_type=leave.leave_type,
            days=leave.number_of_days,
        )
        log.info(
            "Leave %s approved by %s (%s, %s day(s) debited from %s)",
            leave.request_id,
            approver.employee_id,
            approver.role.value,
            leave.number_of_days if leave.is_paid else 0,
            leave.leave_type.value,
        )

        event = LeaveApproved(
            request_id=leave.request_id,
            employee_id=employee.employee_id,
            leave_type=leave.leave_type,
            start_date=leave.start_date,
            end_date=leave.end_date,
            approved_by=approver.employee_id,
        )
        try:
            self._events.publish(LEAVE_APPROVED, event)
        except Exception:
            log.warning("LeaveApproved handlers failed for leave %s", leave.request_id, exc_info=True)

        self._notifier.notify_employee(
            employee,
            "Leave approved",
            f"Your {leave.leave_type.value} leave from {leave.start_date.isoformat()} to "
            f"{leave.end_date.isoformat()} has been approved.",
        )
        return self.get(leave.request_id)

    def _notify_hr(self, subject: str, message: str) -> None:
        self._notifier.notify_employees(self._employees.list_by_role(Role.HR_HEAD), subject, message)

    # -------- Queries --------
    def list(self, filters: LeaveFilter, page: PageRequest) -> dict:
        rows, total = self._leaves.search(filters, offset=page.offset, limit=page.limit)
        return paginated([r.to_dict() for r in rows], total=total, page=page)

    def list_mine(
        self,
        employee_id: int,
        page: PageRequest,
        *,
        status: Optional[LeaveStatus] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> dict:
        return self.list(LeaveFilter(employee_id=int(employee_id), status=status, leave_type=leave_type), page)

    def pending_for_manager(self, manager_id: int) -> Sequence[LeaveRequest]:
        return self._leaves.list_pending_for_manager(int(manager_id))

    def pending_for_hr(self) -> Sequence[LeaveRequest]:
        return self._leaves.list_by_status(LeaveStatus.PENDING_HR)
