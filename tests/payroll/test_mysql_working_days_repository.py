from __future__ import annotations

import json

from src.hr_operations.hr_operations.payroll.model import WorkingDaysOverride
from src.hr_operations.hr_operations.payroll.mysql_working_days_repository import MySQLWorkingDaysRepository
from tests.fakes import ScriptedConnection


def test_save_upserts_overrides_as_json():
    conn = ScriptedConnection(rowcounts=[1])

    MySQLWorkingDaysRepository(conn).save(
        month="2025-01",
        working_days=20,
        overrides=[WorkingDaysOverride(employee_id=4, working_days=10, reason="Joined mid-month")],
        notes=None,
        set_by=2,
    )

    (sql, params), = conn.statements
    assert "ON DUPLICATE KEY UPDATE" in sql
    assert params[:2] == ("2025-01", 20)
    assert json.loads(params[2]) == [{"employee_id": 4, "working_days": 10, "reason": "Joined mid-month"}]


def test_get_reads_stored_configuration():
    row = {
        "month": "2025-01",
        "working_days": 20,
        "overrides": '[{"employee_id": 4, "working_days": 10}]',
        "notes": "Relocation",
        "set_by": 2,
    }
    repo = MySQLWorkingDaysRepository(ScriptedConnection(rows=[row, None]))

    config = repo.get("2025-01")

    assert config.is_custom
    assert config.for_employee(4) == 10
    assert config.for_employee(2) == 20
    assert repo.get("2025-02") is None


def test_malformed_overrides_are_ignored():
    row = {"month": "2025-01", "working_days": 20, "overrides": "not json", "notes": None, "set_by": None}

    config = MySQLWorkingDaysRepository(ScriptedConnection(rows=[row])).get("2025-01")

    assert config.overrides == ()
