from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Optional

from ..core.constants import (
    DEFAULT_CASUAL_LEAVE,
    DEFAULT_EARNED_LEAVE,
    DEFAULT_SICK_LEAVE,
    DEFAULT_WORKING_DAYS,
)


@dataclass(frozen=True)
class LeavePolicy:
    """Yearly paid-leave allotments."""

    sick: int = DEFAULT_SICK_LEAVE
    casual: int = DEFAULT_CASUAL_LEAVE
    earned: int = DEFAULT_EARNED_LEAVE

    @classmethod
    def merged(cls, document: Optional[Mapping[str, Any]], defaults: "LeavePolicy") -> "LeavePolicy":
        """Merge a stored leave-policy document over ``defaults``.

        Accepts both the stored camelCase keys (``sickLeavePerYear``) and short
        keys (``sick``).
        """
        doc = dict(document or {})

        def pick(short: str, long: str, fallback: int) -> int:
            value = doc.get(long, doc.get(short))
            return int(value) if value is not None else fallback

        return cls(
            sick=pick("sick", "sickLeavePerYear", defaults.sick),
            casual=pick("casual", "casualLeavePerYear", defaults.casual),
            earned=pick("earned", "earnedLeavePerYear", defaults.earned),
        )


def normalize_working_days(values: Optional[Iterable[Any]]) -> frozenset[int]:
    """ISO weekdays (1=Mon..7=Sun); a stored 0 also means Sunday."""
    out: set[int] = set()
    for v in values or ():
        day = int(v)
        if day == 0:
            day = 7
        if 1 <= day <= 7:
            out.add(day)
    return frozenset(out)


@dataclass(frozen=True)
class CompanySettings:
    working_days: frozenset[int] = field(default_factory=lambda: frozenset(DEFAULT_WORKING_DAYS))
    leave_policy: LeavePolicy = field(default_factory=LeavePolicy)
