from __future__ import annotations

import pytest

from src.hr_operations.hr_operations.core.enums import LeaveStatus, LeaveType
from src.hr_operations.hr_operations.core.exceptions import (
    ConflictError,
    InsufficientBalanceError,
    NotFoundError,
)
from src.hr_operations.hr_operations.leave.mysql_leave_repository import MySQLLeaveRequestRepository
from tests.fakes import ScriptedConnection


def _approve(conn: ScriptedConnection, leave_type=LeaveType.SICK, days=2) -> None:
    MySQLLeaveRequestRepository(conn).approve_final(
        request_id=7,
        from_statuses=(LeaveStatus.PENDING_HR,),
        employee_id=4,
        leave_type=leave_type,
        days=days,
    )


def test_final_approval_locks_the_request_and_debits_conditionally():
    conn = ScriptedConnection(rows=[{"status": "PENDING_HR"}], rowcounts=[1, 1])

    _approve(conn)

    lock, debit, approve = conn.statements
    assert lock == ("SELECT status FROM leave_requests WHERE request_id=%s FOR UPDATE", (7,))
    assert debit[0].startswith("UPDATE employees SET sick_leave_balance = sick_leave_balance - %s")
    assert debit[0].endswith("AND sick_leave_balance >= %s")
    assert debit[1] == (2, 4, "FULL_TIME", 2)
    assert approve[0].startswith("UPDATE leave_requests SET status=%s, hr_approved=1")
    assert approve[1] == ("APPROVED", 7)
    assert conn.committed and not conn.rolled_back


def test_failed_debit_rolls_back_and_reports_the_balance():
    conn = ScriptedConnection(rows=[{"status": "PENDING_HR"}, {"available": 1}], rowcounts=[0])

    with pytest.raises(InsufficientBalanceError) as err:
        _approve(conn)

    assert (err.value.available, err.value.requested) == (1, 2)
    assert not any(s.startswith("UPDATE leave_requests") for s in conn.sql())
    assert conn.rolled_back and not conn.committed


def test_request_already_moved_on_is_not_debited():
    conn = ScriptedConnection(rows=[{"status": "APPROVED"}])

    with pytest.raises(ConflictError):
        _approve(conn)

    assert len(conn.statements) == 1
    assert conn.rolled_back


def test_missing_request():
    with pytest.raises(NotFoundError):
        _approve(ScriptedConnection(rows=[None]))


def test_unpaid_leave_skips_the_balance_update():
    conn = ScriptedConnection(rows=[{"status": "PENDING_HR"}], rowcounts=[1])

    _approve(conn, leave_type=LeaveType.UNPAID)

    assert [s.split(" SET")[0] for s in conn.sql()[1:]] == ["UPDATE leave_requests"]
    assert conn.committed
