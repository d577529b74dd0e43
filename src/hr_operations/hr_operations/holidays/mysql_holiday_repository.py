from __future__ import annotations

from datetime import date
from typing import Optional, Sequence

import mysql.connector

from ..core.exceptions import ConflictError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Holiday
from .repository import HolidayRepository


def _row_to_holiday(r: dict) -> Holiday:
    return Holiday(
        holiday_id=int(r["holiday_id"]),
        holiday_date=r["holiday_date"],
        name=r["name"],
        description=r.get("description"),
    )


class MySQLHolidayRepository(HolidayRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, holiday_id: int) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_id, holiday_date, name, description FROM holidays WHERE holiday_id=%s",
                (int(holiday_id),),
            )
            r = fetchone(cur)
            return _row_to_holiday(r) if r else None

    def get_by_date(self, holiday_date: date) -> Optional[Holiday]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT holiday_id, holiday_date, name, description FROM holidays WHERE holiday_date=%s",
                (holiday_date,),
            )
            r = fetchone(cur)
            return _row_to_holiday(r) if r else None

    def list_range(self, *, start: Optional[date] = None, end: Optional[date] = None) -> Sequence[Holiday]:
        clauses: list[str] = []
        params: list[object] = []
        if start is not None:
            clauses.append("holiday_date >= %s")
            params.append(start)
        if end is not None:
            clauses.append("holiday_date <= %s")
            params.append(end)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT holiday_id, holiday_date, name, description
                FROM holidays
                WHERE {build_where(clauses)}
                ORDER BY holiday_date ASC
                """,
                tuple(params),
            )
            return [_row_to_holiday(r) for r in fetchall(cur)]

    def create(self, *, holiday_date: date, name: str, description: Optional[str] = None) -> int:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "INSERT INTO holidays(holiday_date, name, description) VALUES(%s,%s,%s)",
                    (holiday_date, name, description),
                )
                return int(cur.lastrowid)
        except mysql.connector.IntegrityError:
            raise ConflictError("A holiday already exists on this date")

    def update(self, *, holiday_id: int, holiday_date: date, name: str, description: Optional[str]) -> bool:
        try:
            with db_cursor(self._conn_factory) as (_, cur):
                cur.execute(
                    "UPDATE holidays SET holiday_date=%s, name=%s, description=%s WHERE holiday_id=%s",
                    (holiday_date, name, description, int(holiday_id)),
                )
                return cur.rowcount > 0
        except mysql.connector.IntegrityError:
            raise ConflictError("A holiday already exists on this date")

    def delete(self, holiday_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM holidays WHERE holiday_id=%s", (int(holiday_id),))
            return cur.rowcount > 0
