from __future__ import annotations

import logging
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal
from typing import Optional, Sequence

from ..common.datetime_utils import Clock, DateLike, SystemClock, as_date, iter_dates, month_bounds
from ..common.pagination import PageRequest, paginated
from ..common.validators import optional_text
from ..core.constants import DEFAULT_PAYROLL_WORKERS, HR_OVERRIDE_PREFIX, SYSTEM_MARKER, WORKED_DAY_WEIGHTS
from ..core.enums import AttendanceStatus, LeaveType
from ..core.exceptions import NotFoundError, ValidationError
from ..employees.model import Employee
from ..employees.repository import EmployeeRepository
from ..holidays.calendar import WorkingCalendar
from ..holidays.service import HolidayDirectory
from ..leave.repository import LeaveRequestRepository
from .model import AttendanceFilter, AttendanceRecord, BulkMarkEntry
from .repository import AttendanceRepository

log = logging.getLogger(__name__)

AUTO_ABSENT_NOTE = "Auto-marked absent (no check-in recorded)"


def _require_markable(status: AttendanceStatus) -> None:
    if status == AttendanceStatus.NOT_MARKED:
        raise ValidationError("NOT_MARKED cannot be stored; it means no record exists")


def _working_hours(check_in: Optional[datetime], now: datetime) -> Optional[Decimal]:
    if check_in is None:
        return None
    seconds = Decimal(str((now - check_in).total_seconds()))
    return (seconds / Decimal(3600)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)


def _leave_status(leave_type: LeaveType) -> AttendanceStatus:
    return AttendanceStatus.PAID_LEAVE if leave_type.is_paid else AttendanceStatus.UNPAID_LEAVE


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        holidays: HolidayDirectory,
        calendar: WorkingCalendar,
        leaves: LeaveRequestRepository,
        *,
        clock: Optional[Clock] = None,
        max_workers: int = DEFAULT_PAYROLL_WORKERS,
    ):
        self._attendance = attendance
        self._employees = employees
        self._holidays = holidays
        self._calendar = calendar
        self._leaves = leaves
        self._clock = clock or SystemClock()
        self._max_workers = max(1, int(max_workers))

    def _require_employee(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    # -------- Writes --------
    def mark(self, employee_id: int, status: AttendanceStatus, notes: Optional[str] = None) -> AttendanceRecord:
        """Self-marking for today. The first mark is the check-in, a re-mark the check-out."""
        _require_markable(status)
        employee = self._require_employee(employee_id)
        now = self._clock.now()
        today = now.date()
        notes = optional_text(notes)

        existing = self._attendance.get_for_employee_and_date(employee.employee_id, today)
        if existing:
            self._attendance.update_mark(
                attendance_id=existing.attendance_id,
                status=status,
                notes=notes,
                check_out_time=now,
                working_hours=_working_hours(existing.check_in_time, now),
            )
        else:
            self._attendance.record_check_in(
                employee_id=employee.employee_id,
                work_date=today,
                status=status,
                check_in_time=now,
                notes=notes,
            )
        return self._attendance.get_for_employee_and_date(employee.employee_id, today)

    def check_out(self, employee_id: int) -> AttendanceRecord:
        now = self._clock.now()
        record = self._attendance.get_for_employee_and_date(int(employee_id), now.date())
        if not record:
            raise ValidationError("No attendance marked for today")
        if record.check_out_time is not None:
            raise ValidationError("Already checked out today")

        self._attendance.update_mark(
            attendance_id=record.attendance_id,
            status=record.status,
            notes=record.notes,
            check_out_time=now,
            working_hours=_working_hours(record.check_in_time, now),
        )
        return self._attendance.get_for_employee_and_date(record.employee_id, record.work_date)

    def bulk_mark(self, work_date: DateLike, records: Sequence[BulkMarkEntry], *, marked_by: int) -> dict:
        """HR bulk upsert. Each employee is written independently."""
        day = as_date(work_date)
        if not records:
            raise ValidationError("At least one record is required")
        for entry in records:
            _require_markable(entry.status)
        missing = sorted({e.employee_id for e in records if not self._employees.get_by_id(int(e.employee_id))})
        if missing:
            raise NotFoundError(f"Employees not found: {', '.join(str(m) for m in missing)}")

        def _write(entry: BulkMarkEntry) -> int:
            return self._attendance.upsert(
                employee_id=int(entry.employee_id),
                work_date=day,
                status=entry.status,
                marked_by=str(marked_by),
                notes=optional_text(entry.notes),
            )

        with ThreadPoolExecutor(max_workers=min(self._max_workers, len(records))) as pool:
            written = list(pool.map(_write, records))

        log.info("Bulk attendance for %s: %s record(s) by %s", day, len(written), marked_by)
        return {"updated": len(written)}

    def override(
        self,
        *,
        employee_id: int,
        work_date: DateLike,
        status: AttendanceStatus,
        notes: Optional[str],
        overridden_by: int,
    ) -> AttendanceRecord:
        _require_markable(status)
        employee = self._require_employee(employee_id)
        day = as_date(work_date)
        text = optional_text(notes)

        self._attendance.upsert(
            employee_id=employee.employee_id,
            work_date=day,
            status=status,
            marked_by=str(overridden_by),
            notes=f"{HR_OVERRIDE_PREFIX} {text}" if text else HR_OVERRIDE_PREFIX,
        )
        log.info("Attendance of %s on %s overridden to %s by %s", employee.employee_id, day, status.value, overridden_by)
        return self._attendance.get_for_employee_and_date(employee.employee_id, day)

    def run_daily_sweep(self, today: Optional[DateLike] = None) -> dict:
        """Fill the day's gaps: OFFICIAL_HOLIDAY on holidays, ABSENT on working days.

        Employees on approved leave are left alone. Safe to re-run.
        """
        day = as_date(today) if today else self._clock.today()
        if self._holidays.is_holiday(day):
            status, note = AttendanceStatus.OFFICIAL_HOLIDAY, None
        elif self._calendar.is_working_day(day):
            status, note = AttendanceStatus.ABSENT, AUTO_ABSENT_NOTE
        else:
            log.info("Attendance sweep skipped for %s: not a working day", day)
            return {"date": day.isoformat(), "status": None, "marked": 0}

        marked = {r.employee_id for r in self._attendance.list_for_date(day)}
        on_leave = set()
        if status == AttendanceStatus.ABSENT:
            on_leave = {l.employee_id for l in self._leaves.list_approved_overlapping(start_date=day, end_date=day)}

        created = 0
        for employee in self._employees.list_active():
            if employee.employee_id in marked or employee.employee_id in on_leave:
                continue
            if self._attendance.insert_if_absent(
                employee_id=employee.employee_id,
                work_date=day,
                status=status,
                marked_by=SYSTEM_MARKER,
                notes=note,
            ):
                created += 1

        log.info("Attendance sweep for %s: %s employee(s) marked %s", day, created, status.value)
        return {"date": day.isoformat(), "status": status.value, "marked": created}

    # -------- Queries --------
    def list(self, filters: AttendanceFilter, page: PageRequest) -> dict:
        rows, total = self._attendance.search(filters, offset=page.offset, limit=page.limit)
        return paginated([r.to_dict() for r in rows], total=total, page=page)

    def calendar(self, employee_id: int, year: int, month: int) -> Sequence[AttendanceRecord]:
        first, last = month_bounds(year, month)
        return self._attendance.list_for_employee(int(employee_id), start=first, end=last)

    def calendar_with_holidays(self, employee_id: int, year: int, month: int) -> list[dict]:
        first, last = month_bounds(year, month)
        records = {r.work_date: r for r in self._attendance.list_for_employee(int(employee_id), start=first, end=last)}
        holidays = {h.holiday_date: h for h in self._holidays.holidays_in_range(first, last)}

        leave_days = {}
        for leave in self._leaves.list_approved_overlapping(
            start_date=first, end_date=last, employee_ids=[int(employee_id)]
        ):
            for d in self._calendar.working_days(max(leave.start_date, first), min(leave.end_date, last)):
                leave_days[d] = leave

        out = []
        for d in iter_dates(first, last):
            record = records.get(d)
            holiday = holidays.get(d)
            leave = leave_days.get(d)

            status = record.status.value if record else None
            notes = record.notes if record else None
            leave_type = None
            if record is None and leave is not None:
                status = _leave_status(leave.leave_type).value
                notes = f"{leave.leave_type.value} Leave: {leave.reason}"
                leave_type = leave.leave_type.value

            out.append(
                {
                    "date": d.isoformat(),
                    "dayOfWeek": d.isoweekday(),
                    "isWeekend": self._calendar.is_weekend(d),
                    "isHoliday": holiday is not None,
                    "holidayName": holiday.name if holiday else None,
                    "status": status,
                    "notes": notes,
                    "markedBy": record.marked_by if record else None,
                    "checkInTime": record.check_in_time.isoformat() if record and record.check_in_time else None,
                    "checkOutTime": record.check_out_time.isoformat() if record and record.check_out_time else None,
                    "workingHours": float(record.working_hours) if record and record.working_hours is not None else None,
                    "leaveType": leave_type,
                }
            )
        return out

    def summary(self, employee_id: int, year: int, month: int) -> dict:
        records = self.calendar(employee_id, year, month)
        counts = Counter(r.status for r in records)
        worked = sum((WORKED_DAY_WEIGHTS.get(r.status, Decimal("0")) for r in records), Decimal("0"))
        return {
            "present": counts[AttendanceStatus.PRESENT],
            "absent": counts[AttendanceStatus.ABSENT] + counts[AttendanceStatus.ABSENT_DOUBLE_DEDUCTION],
            "halfDay": counts[AttendanceStatus.HALF_DAY],
            "paidLeave": counts[AttendanceStatus.PAID_LEAVE],
            "unpaidLeave": counts[AttendanceStatus.UNPAID_LEAVE],
            "holiday": counts[AttendanceStatus.OFFICIAL_HOLIDAY],
            "workedDays": float(worked),
            "total": len(records),
        }

    def today_status(self, employee_id: int) -> dict:
        record = self._attendance.get_for_employee_and_date(int(employee_id), self._clock.today())
        return {
            "marked": record is not None,
            "status": record.status.value if record else None,
            "notes": record.notes if record else None,
            "checkInTime": record.check_in_time.isoformat() if record and record.check_in_time else None,
            "checkOutTime": record.check_out_time.isoformat() if record and record.check_out_time else None,
            "workingHours": float(record.working_hours) if record and record.working_hours is not None else None,
        }

    def _status_board(self, employees: Sequence[Employee], day: date) -> list[dict]:
        records = {r.employee_id: r for r in self._attendance.list_for_date(day)}
        out = []
        for e in employees:
            r = records.get(e.employee_id)
            out.append(
                {
                    "id": e.employee_id,
                    "name": e.full_name,
                    "role": e.role.value,
                    "status": r.status.value if r else AttendanceStatus.NOT_MARKED.value,
                    "notes": r.notes if r else None,
                    "markedBy": r.marked_by if r else None,
                }
            )
        return out

    def team_attendance(self, manager_id: int, work_date: Optional[DateLike] = None) -> list[dict]:
        day = as_date(work_date) if work_date else self._clock.today()
        return self._status_board(self._employees.list_team(int(manager_id)), day)

    def all_employees_attendance(self, work_date: Optional[DateLike] = None) -> list[dict]:
        day = as_date(work_date) if work_date else self._clock.today()
        return self._status_board(self._employees.list_active(), day)
