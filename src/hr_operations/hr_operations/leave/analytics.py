from __future__ import annotations

import calendar
from collections import Counter, defaultdict
from datetime import date, datetime, time, timedelta
from typing import Iterable, Optional

from ..balances.model import LeaveBalance
from ..common.datetime_utils import Clock, SystemClock, iter_dates, month_bounds
from ..core.constants import PENDING_LEAVE_STATUSES
from ..core.enums import LeaveStatus, LeaveType, Role
from ..core.exceptions import ValidationError
from ..employees.repository import EmployeeRepository
from .model import LeaveRequest
from .repository import LeaveRequestRepository


def _period(year: int, month: Optional[int]) -> tuple[date, date]:
    if month is not None:
        if not 1 <= int(month) <= 12:
            raise ValidationError("month must be between 1 and 12")
        return month_bounds(year, month)
    return date(int(year), 1, 1), date(int(year), 12, 31)


def _days_by_type(leaves: Iterable[LeaveRequest]) -> dict:
    totals = {t.value.lower(): 0 for t in LeaveType}
    for leave in leaves:
        totals[leave.leave_type.value.lower()] += leave.number_of_days
    return totals


class LeaveAnalytics:
    """Read-only leave reports for HR and managers."""

    def __init__(
        self,
        leaves: LeaveRequestRepository,
        employees: EmployeeRepository,
        *,
        clock: Optional[Clock] = None,
    ):
        self._leaves = leaves
        self._employees = employees
        self._clock = clock or SystemClock()

    def analytics(self, year: int, month: Optional[int] = None) -> dict:
        """Requests created in the period, grouped by outcome and type."""
        start, end = _period(year, month)
        leaves = self._leaves.list_created_between(
            start=datetime.combine(start, time.min),
            end=datetime.combine(end + timedelta(days=1), time.min),
        )

        total = len(leaves)
        statuses = Counter(l.status for l in leaves)
        approved = statuses[LeaveStatus.APPROVED]
        total_days = sum(l.number_of_days for l in leaves)

        return {
            "period": {"year": int(year), "month": month},
            "totalRequests": total,
            "approved": approved,
            "rejected": statuses[LeaveStatus.REJECTED],
            "pending": sum(statuses[s] for s in PENDING_LEAVE_STATUSES),
            "approvalRate": round(approved * 100 / total) if total else 0,
            "avgDaysPerLeave": round(total_days / total, 1) if total else 0,
            "byType": dict(Counter(l.leave_type.value.lower() for l in leaves)),
            "totalDaysByType": _days_by_type(leaves),
        }

    def monthly_trend(self, year: int) -> dict:
        """Approved leaves bucketed by the month they start in."""
        start, end = _period(year, None)
        approved = [
            l
            for l in self._leaves.list_approved_overlapping(start_date=start, end_date=end)
            if l.start_date.year == int(year)
        ]

        buckets: dict[int, list[LeaveRequest]] = defaultdict(list)
        for leave in approved:
            buckets[leave.start_date.month].append(leave)

        trends = []
        for m in range(1, 13):
            items = buckets.get(m, [])
            trends.append(
                {
                    "month": m,
                    "monthName": calendar.month_name[m],
                    "totalRequests": len(items),
                    "totalDays": sum(l.number_of_days for l in items),
                    "byType": dict(Counter(l.leave_type.value.lower() for l in items)),
                }
            )

        return {
            "year": int(year),
            "trends": trends,
            "totalRequests": sum(t["totalRequests"] for t in trends),
            "totalDays": sum(t["totalDays"] for t in trends),
        }

    def team_calendar(self, manager_id: int, year: int, month: int) -> dict:
        first, last = _period(year, month)
        team = self._employees.list_team(int(manager_id))
        names = {e.employee_id: e.full_name for e in team}
        leaves = (
            self._leaves.list_approved_overlapping(start_date=first, end_date=last, employee_ids=list(names))
            if names
            else []
        )

        days: dict[str, list[dict]] = {}
        for leave in leaves:
            for d in iter_dates(max(leave.start_date, first), min(leave.end_date, last)):
                days.setdefault(d.isoformat(), []).append(
                    {
                        "employee_id": leave.employee_id,
                        "employee_name": names.get(leave.employee_id),
                        "leave_type": leave.leave_type.value,
                    }
                )

        return {
            "year": int(year),
            "month": int(month),
            "team": [{"employee_id": i, "name": n} for i, n in names.items()],
            "leaves": [l.to_dict() for l in leaves],
            "days": dict(sorted(days.items())),
        }

    def leave_report(self, year: int, month: Optional[int] = None) -> dict:
        """Per-employee approved leave falling wholly inside the period, against current balances.

        Heaviest leave takers first.
        """
        start, end = _period(year, month)
        taken: dict[int, list[LeaveRequest]] = defaultdict(list)
        for leave in self._leaves.list_approved_overlapping(start_date=start, end_date=end):
            if leave.start_date >= start and leave.end_date <= end:
                taken[leave.employee_id].append(leave)

        report = []
        for e in self._employees.list_active():
            leaves = taken.get(e.employee_id, [])
            days = _days_by_type(leaves)
            report.append(
                {
                    "employee_id": e.employee_id,
                    "employee_name": e.full_name,
                    "role": e.role.value,
                    "leavesTaken": {
                        "sick": days["sick"],
                        "casual": days["casual"],
                        "earned": days["earned"],
                        "total": days["sick"] + days["casual"] + days["earned"],
                    },
                    "balanceRemaining": LeaveBalance(
                        e.sick_leave_balance, e.casual_leave_balance, e.earned_leave_balance
                    ).to_dict(),
                    "leaveCount": len(leaves),
                }
            )
        report.sort(key=lambda r: (-r["leavesTaken"]["total"], r["employee_id"]))

        return {
            "period": {"year": int(year), "month": month},
            "generatedAt": self._clock.now().isoformat(),
            "employeeCount": len(report),
            "report": report,
        }

    def leave_stats_by_role(self) -> list[dict]:
        """Approved leave totals and average remaining balance for each role."""
        approved: dict[int, list[LeaveRequest]] = defaultdict(list)
        for leave in self._leaves.list_by_status(LeaveStatus.APPROVED):
            approved[leave.employee_id].append(leave)

        by_role = defaultdict(list)
        for e in self._employees.list_active():
            by_role[e.role].append(e)

        stats = []
        for role in Role:
            members = by_role.get(role, [])
            leaves = [l for e in members for l in approved.get(e.employee_id, [])]
            balance_total = sum(
                e.sick_leave_balance + e.casual_leave_balance + e.earned_leave_balance for e in members
            )
            counts = Counter(l.leave_type for l in leaves)
            stats.append(
                {
                    "role": role.value,
                    "totalEmployees": len(members),
                    "totalLeavesTaken": round(sum(l.number_of_days for l in leaves), 1),
                    "avgLeaveBalance": round(balance_total / len(members), 1) if members else 0,
                    "leavesByType": {
                        "sick": counts[LeaveType.SICK],
                        "casual": counts[LeaveType.CASUAL],
                        "earned": counts[LeaveType.EARNED],
                    },
                }
            )
        return stats
