from __future__ import annotations

from enum import Enum


class Role(str, Enum):
    """Role of the acting employee, as supplied by the auth module."""

    EMPLOYEE = "EMPLOYEE"
    MANAGER = "MANAGER"
    HR_HEAD = "HR_HEAD"
    DIRECTOR = "DIRECTOR"


class EmployeeType(str, Enum):
    FULL_TIME = "FULL_TIME"
    INTERN = "INTERN"


class AttendanceStatus(str, Enum):
    """Attendance status stored per (employee, date).

    NOT_MARKED is only used in read models for a missing record.
    """

    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    ABSENT_DOUBLE_DEDUCTION = "ABSENT_DOUBLE_DEDUCTION"
    HALF_DAY = "HALF_DAY"
    PAID_LEAVE = "PAID_LEAVE"
    UNPAID_LEAVE = "UNPAID_LEAVE"
    OFFICIAL_HOLIDAY = "OFFICIAL_HOLIDAY"
    NOT_MARKED = "NOT_MARKED"


class LeaveType(str, Enum):
    SICK = "SICK"
    CASUAL = "CASUAL"
    EARNED = "EARNED"
    UNPAID = "UNPAID"

    @property
    def is_paid(self) -> bool:
        return self is not LeaveType.UNPAID


class LeaveStatus(str, Enum):
    """Leave approval workflow states."""

    PENDING_MANAGER = "PENDING_MANAGER"
    PENDING_HR = "PENDING_HR"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class ReimbursementStatus(str, Enum):
    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"
    PAYMENT_PROCESSED = "PAYMENT_PROCESSED"
    ACKNOWLEDGED = "ACKNOWLEDGED"
