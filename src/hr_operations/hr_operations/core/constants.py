"""Constants and defaults.

Note: Keep constants here to avoid magic numbers spread across code.
"""

from decimal import Decimal

from .enums import AttendanceStatus, LeaveStatus, ReimbursementStatus

SYSTEM_MARKER = "SYSTEM"
HR_OVERRIDE_PREFIX = "[HR Override]"

DEFAULT_WORKING_DAYS = (1, 2, 3, 4, 5)
DEFAULT_SICK_LEAVE = 12
DEFAULT_CASUAL_LEAVE = 12
DEFAULT_EARNED_LEAVE = 15

DEFAULT_PAGE = 1
DEFAULT_PAGE_LIMIT = 10
MAX_PAGE_LIMIT = 200
DEFAULT_UPCOMING_HOLIDAY_DAYS = 30
DEFAULT_PAYROLL_WORKERS = 4

ACTIVE_LEAVE_STATUSES = (LeaveStatus.PENDING_MANAGER, LeaveStatus.PENDING_HR, LeaveStatus.APPROVED)
PENDING_LEAVE_STATUSES = (LeaveStatus.PENDING_MANAGER, LeaveStatus.PENDING_HR)

PAYABLE_REIMBURSEMENT_STATUSES = (
    ReimbursementStatus.APPROVED,
    ReimbursementStatus.PAYMENT_PROCESSED,
    ReimbursementStatus.ACKNOWLEDGED,
)

# Statuses a day counts as worked, with weight.
WORKED_DAY_WEIGHTS = {
    AttendanceStatus.PRESENT: Decimal("1"),
    AttendanceStatus.HALF_DAY: Decimal("0.5"),
    AttendanceStatus.PAID_LEAVE: Decimal("1"),
    AttendanceStatus.OFFICIAL_HOLIDAY: Decimal("1"),
}

# Earned-leave accrual: one day per this many consecutive worked days.
EARNED_LEAVE_STREAK_DAYS = 20
STREAK_EXTENDING_STATUSES = frozenset(
    {AttendanceStatus.PRESENT, AttendanceStatus.HALF_DAY, AttendanceStatus.PAID_LEAVE}
)
STREAK_BREAKING_STATUSES = frozenset({AttendanceStatus.ABSENT, AttendanceStatus.ABSENT_DOUBLE_DEDUCTION})
