from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence, Tuple

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveFilter, LeaveRequest


class LeaveRequestRepository(Protocol):
    def create_pending(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        number_of_days: int,
        reason: str,
    ) -> int:
        """Insert in PENDING_MANAGER.

        Raises ConflictError if an active request of the employee overlaps the
        range; the check and the insert are one unit.
        """

        raise NotImplementedError

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Sequence[LeaveStatus],
    ) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def transition(
        self,
        *,
        request_id: int,
        from_statuses: Sequence[LeaveStatus],
        to_status: LeaveStatus,
        manager_approved: Optional[bool] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        """Conditional status change; False if the request is no longer in ``from_statuses``."""

        raise NotImplementedError

    def approve_final(
        self,
        *,
        request_id: int,
        from_statuses: Sequence[LeaveStatus],
        employee_id: int,
        leave_type: LeaveType,
        days: int,
    ) -> None:
        """Debit the balance (paid types) and move to APPROVED in one transaction.

        Raises ConflictError if the status moved on, InsufficientBalanceError if
        the balance cannot cover ``days``; nothing is written in either case.
        """

        raise NotImplementedError

    def delete_pending(self, *, request_id: int, statuses: Sequence[LeaveStatus]) -> bool:
        raise NotImplementedError

    def search(self, filters: LeaveFilter, *, offset: int, limit: int) -> Tuple[Sequence[LeaveRequest], int]:
        raise NotImplementedError

    def list_pending_for_manager(self, manager_id: int) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_by_status(self, status: LeaveStatus) -> Sequence[LeaveRequest]:
        """Oldest first."""

        raise NotImplementedError

    def list_approved_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
        paid: Optional[bool] = None,
    ) -> Sequence[LeaveRequest]:
        raise NotImplementedError

    def list_created_between(self, *, start: datetime, end: datetime) -> Sequence[LeaveRequest]:
        raise NotImplementedError
