from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, Tuple

from ..core.constants import EARNED_LEAVE_STREAK_DAYS, STREAK_BREAKING_STATUSES, STREAK_EXTENDING_STATUSES
from ..core.enums import AttendanceStatus, LeaveType

BALANCE_COLUMNS = {
    LeaveType.SICK: "sick_leave_balance",
    LeaveType.CASUAL: "casual_leave_balance",
    LeaveType.EARNED: "earned_leave_balance",
}


@dataclass(frozen=True)
class LeaveBalance:
    sick: int
    casual: int
    earned: int

    @property
    def total(self) -> int:
        return self.sick + self.casual + self.earned

    def to_dict(self) -> dict:
        return {"sick": self.sick, "casual": self.casual, "earned": self.earned, "total": self.total}


def accrue_streak(
    streak: int,
    statuses: Iterable[AttendanceStatus],
    *,
    threshold: int = EARNED_LEAVE_STREAK_DAYS,
) -> Tuple[int, int]:
    """Walk date-ordered statuses from a carried-over streak.

    Returns ``(earned_days, remaining_streak)``. Absences reset the streak;
    holidays and unpaid leave neither extend nor break it.
    """
    earned = 0
    for status in statuses:
        if status in STREAK_EXTENDING_STATUSES:
            streak += 1
            if streak >= threshold:
                earned += 1
                streak -= threshold
        elif status in STREAK_BREAKING_STATUSES:
            streak = 0
    return earned, streak
