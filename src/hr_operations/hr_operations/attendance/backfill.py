from __future__ import annotations

import logging

from ..core.constants import SYSTEM_MARKER
from ..core.enums import AttendanceStatus
from ..holidays.calendar import WorkingCalendar
from ..leave.events import LeaveApproved
from .repository import AttendanceRepository

log = logging.getLogger(__name__)


class LeaveBackfillHandler:
    """Writes PAID_LEAVE / UNPAID_LEAVE for every working day of an approved leave.

    Existing records win. Errors are logged; the approval has already committed.
    """

    def __init__(self, attendance: AttendanceRepository, calendar: WorkingCalendar):
        self._attendance = attendance
        self._calendar = calendar

    def __call__(self, event: LeaveApproved) -> int:
        status = AttendanceStatus.PAID_LEAVE if event.leave_type.is_paid else AttendanceStatus.UNPAID_LEAVE
        created = 0
        try:
            for day in self._calendar.working_days(event.start_date, event.end_date):
                if self._attendance.insert_if_absent(
                    employee_id=event.employee_id,
                    work_date=day,
                    status=status,
                    marked_by=SYSTEM_MARKER,
                    notes=f"{event.leave_type.value} leave (request {event.request_id})",
                ):
                    created += 1
        except Exception:
            log.warning(
                "Attendance back-fill failed for leave %s after %s record(s)",
                event.request_id,
                created,
                exc_info=True,
            )
            return created

        log.info("Attendance back-fill for leave %s: %s record(s) created", event.request_id, created)
        return created
