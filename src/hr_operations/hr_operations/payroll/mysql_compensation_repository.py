from __future__ import annotations

from datetime import date
from decimal import Decimal
from typing import Sequence

from ..core.enums import ReimbursementStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone, in_clause
from .repository import CompensationRepository


class MySQLCompensationRepository(CompensationRepository):
    """Read-only sums over rewards and reimbursements (owned by other modules)."""

    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def sum_rewards(self, employee_id: int, *, start: date, end: date) -> Decimal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT COALESCE(SUM(amount), 0) AS total
                FROM rewards
                WHERE employee_id=%s AND award_date BETWEEN %s AND %s
                """,
                (int(employee_id), start, end),
            )
            return Decimal(str((fetchone(cur) or {}).get("total") or 0))

    def sum_reimbursements(
        self,
        employee_id: int,
        *,
        start: date,
        end: date,
        statuses: Sequence[ReimbursementStatus],
    ) -> Decimal:
        status_sql, status_params = in_clause("status", statuses)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT COALESCE(SUM(amount), 0) AS total
                FROM reimbursements
                WHERE employee_id=%s AND expense_date BETWEEN %s AND %s AND {status_sql}
                """,
                tuple([int(employee_id), start, end] + status_params),
            )
            return Decimal(str((fetchone(cur) or {}).get("total") or 0))
