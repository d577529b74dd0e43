from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import Optional, Sequence, Tuple

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import AttendanceFilter, AttendanceRecord
from .repository import AttendanceRepository

_COLUMNS = """
    attendance_id, employee_id, work_date, status, marked_by, notes,
    check_in_time, check_out_time, working_hours
"""


def _row_to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        status=AttendanceStatus(r["status"]),
        marked_by=str(r["marked_by"]),
        notes=r.get("notes"),
        check_in_time=r.get("check_in_time"),
        check_out_time=r.get("check_out_time"),
        working_hours=Decimal(str(r["working_hours"])) if r.get("working_hours") is not None else None,
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE employee_id=%s AND work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _row_to_record(r) if r else None

    def record_check_in(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        check_in_time: datetime,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, status, marked_by, notes, check_in_time)
                VALUES(%s,%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), notes=VALUES(notes),
                    attendance_id=LAST_INSERT_ID(attendance_id)
                """,
                (int(employee_id), work_date, status.value, str(employee_id), notes, check_in_time),
            )
            return int(cur.lastrowid)

    def update_mark(
        self,
        *,
        attendance_id: int,
        status: AttendanceStatus,
        notes: Optional[str],
        check_out_time: Optional[datetime],
        working_hours: Optional[Decimal],
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET status=%s, notes=%s, check_out_time=%s, working_hours=%s
                WHERE attendance_id=%s
                """,
                (status.value, notes, check_out_time, working_hours, int(attendance_id)),
            )
            return cur.rowcount > 0

    def upsert(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        marked_by: str,
        notes: Optional[str] = None,
    ) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO attendance_records(employee_id, work_date, status, marked_by, notes)
                VALUES(%s,%s,%s,%s,%s)
                ON DUPLICATE KEY UPDATE status=VALUES(status), notes=VALUES(notes), marked_by=VALUES(marked_by),
                    attendance_id=LAST_INSERT_ID(attendance_id)
                """,
                (int(employee_id), work_date, status.value, str(marked_by), notes),
            )
            return int(cur.lastrowid)

    def insert_if_absent(
        self,
        *,
        employee_id: int,
        work_date: date,
        status: AttendanceStatus,
        marked_by: str,
        notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT IGNORE INTO attendance_records(employee_id, work_date, status, marked_by, notes)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(employee_id), work_date, status.value, str(marked_by), notes),
            )
            return cur.rowcount > 0

    def list_for_employee(self, employee_id: int, *, start: date, end: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE employee_id=%s AND work_date BETWEEN %s AND %s
                ORDER BY work_date ASC
                """,
                (int(employee_id), start, end),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def list_for_date(self, work_date: date) -> Sequence[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM attendance_records WHERE work_date=%s ORDER BY employee_id ASC",
                (work_date,),
            )
            return [_row_to_record(r) for r in fetchall(cur)]

    def search(
        self,
        filters: AttendanceFilter,
        *,
        offset: int,
        limit: int,
    ) -> Tuple[Sequence[AttendanceRecord], int]:
        clauses: list[str] = []
        params: list[object] = []

        if filters.employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(filters.employee_id))
        if filters.status is not None:
            clauses.append("status=%s")
            params.append(filters.status.value)
        if filters.start_date is not None:
            clauses.append("work_date >= %s")
            params.append(filters.start_date)
        if filters.end_date is not None:
            clauses.append("work_date <= %s")
            params.append(filters.end_date)

        where = build_where(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT COUNT(*) AS total FROM attendance_records WHERE {where}", tuple(params))
            total = int((fetchone(cur) or {}).get("total") or 0)
            cur.execute(
                f"""
                SELECT {_COLUMNS}
                FROM attendance_records
                WHERE {where}
                ORDER BY work_date DESC, employee_id ASC
                LIMIT %s OFFSET %s
                """,
                tuple(params + [int(limit), int(offset)]),
            )
            return [_row_to_record(r) for r in fetchall(cur)], total
