from __future__ import annotations

import json
import logging
from typing import Optional, Sequence

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import WorkingDaysConfig, WorkingDaysOverride
from .repository import WorkingDaysRepository

log = logging.getLogger(__name__)


def _overrides(value) -> Sequence[WorkingDaysOverride]:
    if value is None:
        return ()
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    if isinstance(value, str):
        try:
            value = json.loads(value)
        except ValueError:
            log.warning("Ignoring malformed working-day overrides: %r", value)
            return ()
    return tuple(
        WorkingDaysOverride(
            employee_id=int(o["employee_id"]),
            working_days=int(o["working_days"]),
            reason=o.get("reason"),
        )
        for o in value or ()
    )


class MySQLWorkingDaysRepository(WorkingDaysRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, month: str) -> Optional[WorkingDaysConfig]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT month, working_days, overrides, notes, set_by FROM monthly_working_days WHERE month=%s",
                (month,),
            )
            row = fetchone(cur)
        if not row:
            return None
        return WorkingDaysConfig(
            month=row["month"],
            working_days=int(row["working_days"]),
            overrides=_overrides(row.get("overrides")),
            notes=row.get("notes"),
            set_by=row.get("set_by"),
            is_custom=True,
        )

    def save(
        self,
        *,
        month: str,
        working_days: int,
        overrides: Sequence[WorkingDaysOverride],
        notes: Optional[str],
        set_by: Optional[int],
    ) -> None:
        doc = json.dumps([o.to_dict() for o in overrides])
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO monthly_working_days (month, working_days, overrides, notes, set_by)
                VALUES (%s, %s, %s, %s, %s)
                ON DUPLICATE KEY UPDATE
                    working_days=VALUES(working_days),
                    overrides=VALUES(overrides),
                    notes=VALUES(notes),
                    set_by=VALUES(set_by)
                """,
                (month, int(working_days), doc, notes, set_by),
            )
