from __future__ import annotations

from ..core.enums import EmployeeType, LeaveType
from ..core.exceptions import ValidationError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor
from ..settings.model import LeavePolicy
from .model import BALANCE_COLUMNS
from .repository import BalanceRepository


def debit_balance(cur, *, employee_id: int, leave_type: LeaveType, days: int) -> bool:
    """Conditional decrement on an open cursor so callers can share the transaction."""
    column = BALANCE_COLUMNS.get(leave_type)
    if column is None:
        raise ValidationError(f"{leave_type.value} leave has no balance")
    cur.execute(
        f"""
        UPDATE employees
        SET {column} = {column} - %s
        WHERE employee_id=%s AND employee_type=%s AND {column} >= %s
        """,
        (int(days), int(employee_id), EmployeeType.FULL_TIME.value, int(days)),
    )
    return cur.rowcount > 0


class MySQLBalanceRepository(BalanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def debit(self, *, employee_id: int, leave_type: LeaveType, days: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            return debit_balance(cur, employee_id=employee_id, leave_type=leave_type, days=days)

    def set_balances(self, *, employee_id: int, sick: int, casual: int, earned: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET sick_leave_balance=%s, casual_leave_balance=%s, earned_leave_balance=%s
                WHERE employee_id=%s
                """,
                (int(sick), int(casual), int(earned), int(employee_id)),
            )
            return cur.rowcount > 0

    def reset_full_time(self, *, policy: LeavePolicy) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET sick_leave_balance=%s, casual_leave_balance=%s, earned_leave_balance=%s
                WHERE employee_type=%s
                """,
                (int(policy.sick), int(policy.casual), int(policy.earned), EmployeeType.FULL_TIME.value),
            )
            updated = cur.rowcount
            cur.execute(
                """
                UPDATE employees
                SET sick_leave_balance=0, casual_leave_balance=0, earned_leave_balance=0
                WHERE employee_type=%s
                """,
                (EmployeeType.INTERN.value,),
            )
            return int(updated)

    def adjust(self, *, employee_id: int, leave_type: LeaveType, delta: int) -> bool:
        column = BALANCE_COLUMNS.get(leave_type)
        if column is None:
            raise ValidationError(f"{leave_type.value} leave has no balance")
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                UPDATE employees
                SET {column} = {column} + %s
                WHERE employee_id=%s AND employee_type=%s AND {column} + %s >= 0
                """,
                (int(delta), int(employee_id), EmployeeType.FULL_TIME.value, int(delta)),
            )
            return cur.rowcount > 0

    def record_accrual(self, *, employee_id: int, month: str, streak: int, earned: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE employees
                SET consecutive_working_days=%s,
                    earned_leave_balance = earned_leave_balance + %s,
                    last_accrual_month=%s
                WHERE employee_id=%s AND employee_type=%s
                  AND (last_accrual_month IS NULL OR last_accrual_month < %s)
                """,
                (int(streak), int(earned), month, int(employee_id), EmployeeType.FULL_TIME.value, month),
            )
            return cur.rowcount > 0
