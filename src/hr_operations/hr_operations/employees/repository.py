from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..core.enums import Role
from .model import Employee


class EmployeeRepository(Protocol):
    """Employee directory interface.

    Note (DIP): services depend on this interface, not on a concrete DB.
    """

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def list_active(self, *, full_time_only: bool = False) -> Sequence[Employee]:
        raise NotImplementedError

    def list_team(self, manager_id: int) -> Sequence[Employee]:
        raise NotImplementedError

    def list_by_role(self, role: Role) -> Sequence[Employee]:
        """Active employees holding ``role``."""

        raise NotImplementedError
