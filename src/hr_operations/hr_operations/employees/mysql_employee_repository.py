from __future__ import annotations

from decimal import Decimal
from typing import Optional, Sequence

from ..core.enums import EmployeeType, Role
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Employee
from .repository import EmployeeRepository

_COLUMNS = """
    employee_id, full_name, email, role, employee_type, salary, manager_id,
    sick_leave_balance, casual_leave_balance, earned_leave_balance, is_active,
    consecutive_working_days, last_accrual_month
"""


def row_to_employee(row: dict) -> Employee:
    return Employee(
        employee_id=int(row["employee_id"]),
        full_name=row["full_name"],
        email=row.get("email"),
        role=Role(row["role"]),
        employee_type=EmployeeType(row["employee_type"]),
        salary=Decimal(str(row.get("salary") or 0)),
        manager_id=int(row["manager_id"]) if row.get("manager_id") is not None else None,
        sick_leave_balance=int(row.get("sick_leave_balance") or 0),
        casual_leave_balance=int(row.get("casual_leave_balance") or 0),
        earned_leave_balance=int(row.get("earned_leave_balance") or 0),
        is_active=bool(row.get("is_active", True)),
        consecutive_working_days=int(row.get("consecutive_working_days") or 0),
        last_accrual_month=row.get("last_accrual_month"),
    )


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM employees WHERE employee_id=%s", (int(employee_id),))
            row = fetchone(cur)
            return row_to_employee(row) if row else None

    def list_active(self, *, full_time_only: bool = False) -> Sequence[Employee]:
        sql = f"SELECT {_COLUMNS} FROM employees WHERE is_active=1"
        params: tuple = ()
        if full_time_only:
            sql += " AND employee_type=%s"
            params = (EmployeeType.FULL_TIME.value,)
        sql += " ORDER BY full_name ASC, employee_id ASC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, params)
            return [row_to_employee(r) for r in fetchall(cur)]

    def list_team(self, manager_id: int) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE manager_id=%s ORDER BY full_name ASC",
                (int(manager_id),),
            )
            return [row_to_employee(r) for r in fetchall(cur)]

    def list_by_role(self, role: Role) -> Sequence[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM employees WHERE role=%s AND is_active=1 ORDER BY employee_id ASC",
                (role.value,),
            )
            return [row_to_employee(r) for r in fetchall(cur)]
