"""Periodic jobs exposed as Flask CLI commands (run by cron)."""

from __future__ import annotations

import logging

import click
from flask import Flask
from flask.cli import AppGroup

from .common.datetime_utils import month_key, parse_iso_date, previous_month
from .container import Container

log = logging.getLogger(__name__)


def register(app: Flask, container: Container) -> None:
    payroll_cli = AppGroup("payroll", help="Payslip generation.")
    attendance_cli = AppGroup("attendance", help="Attendance maintenance.")
    leave_cli = AppGroup("leave", help="Leave balance administration.")

    @payroll_cli.command("generate")
    @click.option("--month", default=None, help="Month as YYYY-MM (default: previous month).")
    def payroll_generate(month):
        if not month:
            month = month_key(*previous_month(container.clock.today()))
        result = container.payroll_service.generate(month)
        click.echo(f"{result.month}: {result.count} payslip(s) generated, {len(result.failures)} failed")
        for failure in result.failures:
            click.echo(f"  employee {failure.employee_id}: {failure.error}")

    @payroll_cli.command("previous-month")
    def payroll_previous_month():
        result = container.payroll_service.generate_previous_month()
        if result is None:
            click.echo("Payslips already exist for the previous month, nothing to do")
        else:
            click.echo(f"{result.month}: {result.count} payslip(s) generated, {len(result.failures)} failed")

    @payroll_cli.command("accrue")
    @click.option("--month", default=None, help="Month as YYYY-MM (default: previous month).")
    def payroll_accrue(month):
        if not month:
            month = month_key(*previous_month(container.clock.today()))
        outcome = container.payroll_service.process_earned_leave_accrual(month)
        click.echo(
            f"{outcome['month']}: {outcome['processedEmployees']} employee(s) processed, "
            f"{outcome['totalAccrued']} earned leave day(s) accrued"
        )

    @attendance_cli.command("sweep")
    @click.option("--date", "day", default=None, help="Day as YYYY-MM-DD (default: today).")
    def attendance_sweep(day):
        outcome = container.attendance_service.run_daily_sweep(parse_iso_date(day) if day else None)
        click.echo(f"{outcome['date']}: {outcome['marked']} record(s) marked {outcome['status'] or '-'}")

    @leave_cli.command("reset-balances")
    def leave_reset_balances():
        outcome = container.balance_ledger.reset_all()
        click.echo(f"{outcome['employees_updated']} employee(s) reset to {outcome['leave_policy']}")

    app.cli.add_command(payroll_cli)
    app.cli.add_command(attendance_cli)
    app.cli.add_command(leave_cli)
