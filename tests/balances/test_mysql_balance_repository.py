from __future__ import annotations

from src.hr_operations.hr_operations.balances.mysql_balance_repository import MySQLBalanceRepository
from src.hr_operations.hr_operations.core.enums import LeaveType
from tests.fakes import ScriptedConnection


def test_adjust_only_applies_when_the_result_stays_non_negative():
    conn = ScriptedConnection(rowcounts=[0])

    assert MySQLBalanceRepository(conn).adjust(employee_id=4, leave_type=LeaveType.EARNED, delta=-3) is False

    (sql, params), = conn.statements
    assert sql.endswith("AND earned_leave_balance + %s >= 0")
    assert params == (-3, 4, "FULL_TIME", -3)


def test_record_accrual_is_guarded_by_the_last_processed_month():
    conn = ScriptedConnection(rowcounts=[1])

    assert MySQLBalanceRepository(conn).record_accrual(employee_id=4, month="2025-01", streak=2, earned=1)

    (sql, params), = conn.statements
    assert "earned_leave_balance = earned_leave_balance + %s" in sql
    assert sql.endswith("AND (last_accrual_month IS NULL OR last_accrual_month < %s)")
    assert params == (2, 1, "2025-01", 4, "FULL_TIME", "2025-01")
    assert conn.committed
