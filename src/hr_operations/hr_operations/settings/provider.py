from __future__ import annotations

import json
import logging
from typing import Optional, Protocol

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import CompanySettings, LeavePolicy, normalize_working_days

log = logging.getLogger(__name__)


class CompanySettingsProvider(Protocol):
    """Read-only view of the company-settings store."""

    def get_working_days(self) -> frozenset[int]:
        raise NotImplementedError

    def get_leave_policy_defaults(self) -> LeavePolicy:
        raise NotImplementedError


class StaticSettingsProvider(CompanySettingsProvider):
    def __init__(self, settings: Optional[CompanySettings] = None):
        self._settings = settings or CompanySettings()

    def get_working_days(self) -> frozenset[int]:
        return self._settings.working_days

    def get_leave_policy_defaults(self) -> LeavePolicy:
        return self._settings.leave_policy


class MySQLSettingsProvider(CompanySettingsProvider):
    """Reads the single ``company_settings`` row; configured defaults fill the gaps."""

    def __init__(self, conn_factory: DatabaseConnection, *, defaults: Optional[CompanySettings] = None):
        self._conn_factory = conn_factory
        self._defaults = defaults or CompanySettings()

    def load(self) -> CompanySettings:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("SELECT working_days, leave_policies FROM company_settings ORDER BY settings_id LIMIT 1")
            row = fetchone(cur)

        if not row:
            return self._defaults

        working_days = normalize_working_days(_json(row.get("working_days")))
        if not working_days:
            working_days = self._defaults.working_days

        return CompanySettings(
            working_days=working_days,
            leave_policy=LeavePolicy.merged(_json(row.get("leave_policies")), self._defaults.leave_policy),
        )

    def get_working_days(self) -> frozenset[int]:
        return self.load().working_days

    def get_leave_policy_defaults(self) -> LeavePolicy:
        return self.load().leave_policy


def _json(value):
    if value is None or isinstance(value, (list, dict)):
        return value
    if isinstance(value, (bytes, bytearray)):
        value = value.decode("utf-8")
    try:
        return json.loads(value)
    except ValueError:
        log.warning("Ignoring malformed company settings document: %r", value)
        return None
