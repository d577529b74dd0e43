from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from typing import Optional

from .attendance.backfill import LeaveBackfillHandler
from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .balances.mysql_balance_repository import MySQLBalanceRepository
from .balances.service import BalanceLedger
from .common.datetime_utils import Clock, SystemClock
from .common.events import EventBus
from .core.constants import DEFAULT_PAYROLL_WORKERS
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .holidays.calendar import WorkingCalendar
from .holidays.mysql_holiday_repository import MySQLHolidayRepository
from .holidays.service import HolidayDirectory
from .leave.analytics import LeaveAnalytics
from .leave.events import LEAVE_APPROVED
from .leave.mysql_leave_repository import MySQLLeaveRequestRepository
from .leave.service import LeaveWorkflow
from .notifications.gateway import EmailNotificationGateway, NotificationDispatcher, SMTPConfig
from .payroll.mysql_compensation_repository import MySQLCompensationRepository
from .payroll.mysql_payslip_repository import MySQLPayslipRepository
from .payroll.mysql_working_days_repository import MySQLWorkingDaysRepository
from .payroll.service import PayrollService
from .settings.model import CompanySettings, LeavePolicy, normalize_working_days
from .settings.provider import MySQLSettingsProvider


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection
    clock: Clock
    events: EventBus

    employees_repo: MySQLEmployeeRepository
    holidays_repo: MySQLHolidayRepository
    balances_repo: MySQLBalanceRepository
    attendance_repo: MySQLAttendanceRepository
    leaves_repo: MySQLLeaveRequestRepository
    payslips_repo: MySQLPayslipRepository
    working_days_repo: MySQLWorkingDaysRepository

    settings_provider: MySQLSettingsProvider
    holiday_directory: HolidayDirectory
    working_calendar: WorkingCalendar
    balance_ledger: BalanceLedger
    attendance_service: AttendanceService
    leave_workflow: LeaveWorkflow
    leave_analytics: LeaveAnalytics
    payroll_service: PayrollService
    notifier: NotificationDispatcher


def build_container(
    *,
    db_config: dict,
    working_days: Optional[list] = None,
    leave_policy: Optional[dict] = None,
    smtp: Optional[dict] = None,
    payroll_workers: int = DEFAULT_PAYROLL_WORKERS,
    clock: Optional[Clock] = None,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))
    clock = clock or SystemClock()
    events = EventBus()

    defaults = CompanySettings()
    if working_days:
        defaults = CompanySettings(working_days=normalize_working_days(working_days), leave_policy=defaults.leave_policy)
    if leave_policy:
        defaults = CompanySettings(
            working_days=defaults.working_days,
            leave_policy=LeavePolicy.merged(leave_policy, defaults.leave_policy),
        )

    employees_repo = MySQLEmployeeRepository(conn)
    holidays_repo = MySQLHolidayRepository(conn)
    balances_repo = MySQLBalanceRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    leaves_repo = MySQLLeaveRequestRepository(conn)
    payslips_repo = MySQLPayslipRepository(conn)
    compensation_repo = MySQLCompensationRepository(conn)
    working_days_repo = MySQLWorkingDaysRepository(conn)

    settings_provider = MySQLSettingsProvider(conn, defaults=defaults)
    notifier = NotificationDispatcher(
        EmailNotificationGateway(SMTPConfig.from_dict(smtp)),
        executor=ThreadPoolExecutor(max_workers=2, thread_name_prefix="notify"),
    )

    holiday_directory = HolidayDirectory(holidays_repo, clock=clock)
    working_calendar = WorkingCalendar(holiday_directory, settings_provider)
    balance_ledger = BalanceLedger(employees_repo, balances_repo, settings_provider)
    attendance_service = AttendanceService(
        attendance_repo,
        employees_repo,
        holiday_directory,
        working_calendar,
        leaves_repo,
        clock=clock,
        max_workers=payroll_workers,
    )
    leave_workflow = LeaveWorkflow(
        leaves_repo,
        employees_repo,
        balance_ledger,
        working_calendar,
        events,
        notifier,
    )
    leave_analytics = LeaveAnalytics(leaves_repo, employees_repo, clock=clock)
    payroll_service = PayrollService(
        payslips_repo,
        compensation_repo,
        employees_repo,
        attendance_repo,
        leaves_repo,
        working_calendar,
        notifier,
        working_days_repo,
        balance_ledger,
        clock=clock,
        max_workers=payroll_workers,
    )

    events.subscribe(LEAVE_APPROVED, LeaveBackfillHandler(attendance_repo, working_calendar))

    return Container(
        conn=conn,
        clock=clock,
        events=events,
        employees_repo=employees_repo,
        holidays_repo=holidays_repo,
        balances_repo=balances_repo,
        attendance_repo=attendance_repo,
        leaves_repo=leaves_repo,
        payslips_repo=payslips_repo,
        working_days_repo=working_days_repo,
        settings_provider=settings_provider,
        holiday_directory=holiday_directory,
        working_calendar=working_calendar,
        balance_ledger=balance_ledger,
        attendance_service=attendance_service,
        leave_workflow=leave_workflow,
        leave_analytics=leave_analytics,
        payroll_service=payroll_service,
        notifier=notifier,
    )
