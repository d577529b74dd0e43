from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence, Tuple

from ..balances.model import BALANCE_COLUMNS
from ..balances.mysql_balance_repository import debit_balance
from ..core.constants import ACTIVE_LEAVE_STATUSES
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import ConflictError, InsufficientBalanceError, NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone, in_clause
from .model import LeaveFilter, LeaveRequest
from .repository import LeaveRequestRepository

_SELECT = """
    SELECT lr.request_id, lr.employee_id, lr.leave_type, lr.start_date, lr.end_date,
           lr.number_of_days, lr.reason, lr.status, lr.manager_approved, lr.hr_approved,
           lr.rejection_reason, lr.created_at, e.full_name AS employee_name
    FROM leave_requests lr
    JOIN employees e ON e.employee_id = lr.employee_id
"""


def _row_to_request(r: dict) -> LeaveRequest:
    return LeaveRequest(
        request_id=int(r["request_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        number_of_days=int(r["number_of_days"]),
        reason=r.get("reason") or "",
        status=LeaveStatus(r["status"]),
        created_at=r.get("created_at"),
        manager_approved=bool(r.get("manager_approved")),
        hr_approved=bool(r.get("hr_approved")),
        rejection_reason=r.get("rejection_reason"),
        employee_name=r.get("employee_name"),
    )


def _find_overlapping(cur, *, employee_id: int, start_date: date, end_date: date, statuses) -> Optional[dict]:
    status_sql, status_params = in_clause("lr.status", statuses)
    cur.execute(
        _SELECT
        + f"""
        WHERE lr.employee_id=%s AND {status_sql}
          AND lr.start_date <= %s AND lr.end_date >= %s
        ORDER BY lr.start_date ASC
        LIMIT 1
        """,
        tuple([int(employee_id)] + status_params + [end_date, start_date]),
    )
    return fetchone(cur)


class MySQLLeaveRequestRepository(LeaveRequestRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

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
        with db_cursor(self._conn_factory) as (_, cur):
            # Serializes submissions of the same employee.
            cur.execute("SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE", (int(employee_id),))
            if not fetchone(cur):
                raise NotFoundError("Employee not found")

            clash = _find_overlapping(
                cur,
                employee_id=employee_id,
                start_date=start_date,
                end_date=end_date,
                statuses=ACTIVE_LEAVE_STATUSES,
            )
            if clash:
                raise ConflictError("You already have a leave request for overlapping dates")

            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, number_of_days, reason, is_paid, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    leave_type.value,
                    start_date,
                    end_date,
                    int(number_of_days),
                    reason,
                    1 if leave_type.is_paid else 0,
                    LeaveStatus.PENDING_MANAGER.value,
                ),
            )
            return int(cur.lastrowid)

    def get(self, request_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE lr.request_id=%s", (int(request_id),))
            r = fetchone(cur)
            return _row_to_request(r) if r else None

    def find_overlapping(
        self,
        *,
        employee_id: int,
        start_date: date,
        end_date: date,
        statuses: Sequence[LeaveStatus],
    ) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            r = _find_overlapping(
                cur, employee_id=employee_id, start_date=start_date, end_date=end_date, statuses=statuses
            )
            return _row_to_request(r) if r else None

    def transition(
        self,
        *,
        request_id: int,
        from_statuses: Sequence[LeaveStatus],
        to_status: LeaveStatus,
        manager_approved: Optional[bool] = None,
        rejection_reason: Optional[str] = None,
    ) -> bool:
        sets = ["status=%s"]
        params: list[object] = [to_status.value]
        if manager_approved is not None:
            sets.append("manager_approved=%s")
            params.append(1 if manager_approved else 0)
        if rejection_reason is not None:
            sets.append("rejection_reason=%s")
            params.append(rejection_reason)

        status_sql, status_params = in_clause("status", from_statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"UPDATE leave_requests SET {', '.join(sets)} WHERE request_id=%s AND {status_sql}",
                tuple(params + [int(request_id)] + status_params),
            )
            return cur.rowcount > 0

    def approve_final(
        self,
        *,
        request_id: int,
        from_statuses: Sequence[LeaveStatus],
        employee_id: int,
        leave_type: LeaveType,
        days: int,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT status FROM leave_requests WHERE request_id=%s FOR UPDATE", (int(request_id),))
            row = fetchone(cur)
            if not row:
                raise NotFoundError("Leave request not found")
            if LeaveStatus(row["status"]) not in tuple(from_statuses):
                raise ConflictError("Leave request has already been processed")

            if leave_type.is_paid and not debit_balance(
                cur, employee_id=employee_id, leave_type=leave_type, days=days
            ):
                column = BALANCE_COLUMNS[leave_type]
                cur.execute(f"SELECT {column} AS available FROM employees WHERE employee_id=%s", (int(employee_id),))
                available = int((fetchone(cur) or {}).get("available") or 0)
                raise InsufficientBalanceError(leave_type.value, available=available, requested=int(days))

            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, hr_approved=1
                WHERE request_id=%s
                """,
                (LeaveStatus.APPROVED.value, int(request_id)),
            )

    def delete_pending(self, *, request_id: int, statuses: Sequence[LeaveStatus]) -> bool:
        status_sql, status_params = in_clause("status", statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"DELETE FROM leave_requests WHERE request_id=%s AND {status_sql}",
                tuple([int(request_id)] + status_params),
            )
            return cur.rowcount > 0

    def search(self, filters: LeaveFilter, *, offset: int, limit: int) -> Tuple[Sequence[LeaveRequest], int]:
        clauses: list[str] = []
        params: list[object] = []

        if filters.employee_id is not None:
            clauses.append("lr.employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.employee_ids is not None:
            sql, p = in_clause("lr.employee_id", filters.employee_ids)
            clauses.append(sql)
            params.extend(p)
        if filters.leave_type is not None:
            clauses.append("lr.leave_type=%s")
            params.append(filters.leave_type.value)
        if filters.status is not None:
            clauses.append("lr.status=%s")
            params.append(filters.status.value)
        if filters.start_date is not None:
            clauses.append("lr.end_date >= %s")
            params.append(filters.start_date)
        if filters.end_date is not None:
            clauses.append("lr.start_date <= %s")
            params.append(filters.end_date)

        where = build_where(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM leave_requests lr WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                _SELECT + f" WHERE {where} ORDER BY lr.created_at DESC, lr.request_id DESC LIMIT %s OFFSET %s",
                tuple(params + [int(limit), int(offset)]),
            )
            return [_row_to_request(r) for r in fetchall(cur)], total

    def list_pending_for_manager(self, manager_id: int) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE e.manager_id=%s AND lr.status=%s ORDER BY lr.created_at ASC",
                (int(manager_id), LeaveStatus.PENDING_MANAGER.value),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_by_status(self, status: LeaveStatus) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE lr.status=%s ORDER BY lr.created_at ASC", (status.value,))
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_approved_overlapping(
        self,
        *,
        start_date: date,
        end_date: date,
        employee_ids: Optional[Sequence[int]] = None,
        paid: Optional[bool] = None,
    ) -> Sequence[LeaveRequest]:
        clauses = ["lr.status=%s", "lr.start_date <= %s", "lr.end_date >= %s"]
        params: list[object] = [LeaveStatus.APPROVED.value, end_date, start_date]
        if employee_ids is not None:
            sql, p = in_clause("lr.employee_id", employee_ids)
            clauses.append(sql)
            params.extend(p)
        if paid is not None:
            clauses.append("lr.is_paid=%s")
            params.append(1 if paid else 0)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + f" WHERE {build_where(clauses)} ORDER BY lr.start_date ASC",
                tuple(params),
            )
            return [_row_to_request(r) for r in fetchall(cur)]

    def list_created_between(self, *, start: datetime, end: datetime) -> Sequence[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                _SELECT + " WHERE lr.created_at >= %s AND lr.created_at < %s ORDER BY lr.created_at ASC",
                (start, end),
            )
            return [_row_to_request(r) for r in fetchall(cur)]
