from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .calculator.standard_calculator import round_money
from .model import Payslip, PayslipFigures
from .repository import PayslipRepository

_SELECT = """
    SELECT p.payslip_id, p.employee_id, p.month, p.base_salary, p.working_days, p.actual_working_days,
           p.unpaid_leaves, p.unapproved_absences, p.holiday_sandwich, p.rewards, p.reimbursements,
           p.gross_pay, p.deductions, p.net_pay, p.created_at, p.regenerated_at,
           e.full_name AS employee_name
    FROM payslips p
    JOIN employees e ON e.employee_id = p.employee_id
"""


def _dec(value) -> Decimal:
    return Decimal(str(value if value is not None else 0))


def _row_to_payslip(r: dict) -> Payslip:
    base = _dec(r["base_salary"])
    working_days = int(r["working_days"])
    per_day = round_money(base / working_days) if working_days else Decimal("0")
    return Payslip(
        payslip_id=int(r["payslip_id"]),
        employee_id=int(r["employee_id"]),
        month=r["month"],
        figures=PayslipFigures(
            base_salary=base,
            working_days=working_days,
            per_day_salary=per_day,
            actual_working_days=_dec(r["actual_working_days"]),
            unpaid_leaves=int(r["unpaid_leaves"]),
            unapproved_absences=int(r["unapproved_absences"]),
            holiday_sandwich=int(r.get("holiday_sandwich") or 0),
            rewards=_dec(r["rewards"]),
            reimbursements=_dec(r["reimbursements"]),
            gross_pay=_dec(r["gross_pay"]),
            deductions=_dec(r["deductions"]),
            net_pay=_dec(r["net_pay"]),
        ),
        created_at=r.get("created_at"),
        regenerated_at=r.get("regenerated_at"),
        employee_name=r.get("employee_name"),
    )


class MySQLPayslipRepository(PayslipRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def upsert(self, *, employee_id: int, month: str, figures: PayslipFigures, regenerated_at: datetime) -> int:
        f = figures
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO payslips(
                    employee_id, month, base_salary, working_days, actual_working_days, unpaid_leaves,
                    unapproved_absences, holiday_sandwich, rewards, reimbursements, gross_pay, deductions,
                    net_pay, regenerated_at
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE
                    base_salary=VALUES(base_salary), working_days=VALUES(working_days),
                    actual_working_days=VALUES(actual_working_days), unpaid_leaves=VALUES(unpaid_leaves),
                    unapproved_absences=VALUES(unapproved_absences), holiday_sandwich=VALUES(holiday_sandwich),
                    rewards=VALUES(rewards), reimbursements=VALUES(reimbursements),
                    gross_pay=VALUES(gross_pay), deductions=VALUES(deductions), net_pay=VALUES(net_pay),
                    regenerated_at=VALUES(regenerated_at),
                    payslip_id=LAST_INSERT_ID(payslip_id)
                """,
                (
                    int(employee_id),
                    month,
                    f.base_salary,
                    f.working_days,
                    f.actual_working_days,
                    f.unpaid_leaves,
                    f.unapproved_absences,
                    f.holiday_sandwich,
                    f.rewards,
                    f.reimbursements,
                    f.gross_pay,
                    f.deductions,
                    f.net_pay,
                    regenerated_at,
                ),
            )
            return int(cur.lastrowid)

    def get(self, payslip_id: int) -> Optional[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.payslip_id=%s", (int(payslip_id),))
            r = fetchone(cur)
            return _row_to_payslip(r) if r else None

    def list_for_month(self, month: str) -> Sequence[Payslip]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(_SELECT + " WHERE p.month=%s ORDER BY e.full_name ASC", (month,))
            return [_row_to_payslip(r) for r in fetchall(cur)]

    def list_for_employee(self, employee_id: int, *, year: Optional[int] = None) -> Sequence[Payslip]:
        sql = _SELECT + " WHERE p.employee_id=%s"
        params: list[object] = [int(employee_id)]
        if year:
            sql += " AND p.month LIKE %s"
            params.append(f"{int(year):04d}-%")
        sql += " ORDER BY p.month DESC"

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_row_to_payslip(r) for r in fetchall(cur)]

    def count_for_month(self, month: str) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT COUNT(*) AS total FROM payslips WHERE month=%s", (month,))
            return int((fetchone(cur) or {}).get("total") or 0)
