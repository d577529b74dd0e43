from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import arg_date, arg_int, current_actor, enum_value, json_body, roles_required
from ..common.pagination import PageRequest
from ..core.enums import AttendanceStatus, Role
from ..core.exceptions import ValidationError
from .model import AttendanceFilter, BulkMarkEntry

HR_ROLES = (Role.HR_HEAD, Role.DIRECTOR)


def _month_args(clock) -> tuple[int, int]:
    today = clock.today()
    return arg_int("year", today.year), arg_int("month", today.month)


def _filters(employee_id=None) -> AttendanceFilter:
    status = request.args.get("status")
    return AttendanceFilter(
        employee_id=employee_id if employee_id is not None else arg_int("employee_id"),
        status=enum_value(AttendanceStatus, status, "status") if status else None,
        start_date=arg_date("start_date"),
        end_date=arg_date("end_date"),
    )


def register(app: Flask, container) -> None:
    attendance = container.attendance_service
    any_employee = roles_required()

    @app.post("/api/attendance/mark", endpoint="attendance_mark")
    @any_employee
    def attendance_mark():
        employee_id, _ = current_actor()
        data = json_body()
        record = attendance.mark(
            employee_id,
            enum_value(AttendanceStatus, data.get("status"), "status"),
            data.get("notes"),
        )
        return jsonify(record.to_dict())

    @app.post("/api/attendance/check-out", endpoint="attendance_check_out")
    @any_employee
    def attendance_check_out():
        employee_id, _ = current_actor()
        return jsonify(attendance.check_out(employee_id).to_dict())

    @app.post("/api/attendance/bulk", endpoint="attendance_bulk")
    @roles_required(*HR_ROLES)
    def attendance_bulk():
        actor_id, _ = current_actor()
        data = json_body()
        records = data.get("records")
        if not isinstance(records, list):
            raise ValidationError("records must be a list")
        entries = [
            BulkMarkEntry(
                employee_id=int(r["employee_id"]),
                status=enum_value(AttendanceStatus, r.get("status"), "status"),
                notes=r.get("notes"),
            )
            for r in records
        ]
        return jsonify(attendance.bulk_mark(parse_iso_date(data.get("date")), entries, marked_by=actor_id))

    @app.post("/api/attendance/override", endpoint="attendance_override")
    @roles_required(*HR_ROLES)
    def attendance_override():
        actor_id, _ = current_actor()
        data = json_body()
        record = attendance.override(
            employee_id=int(data.get("employee_id") or 0),
            work_date=parse_iso_date(data.get("date")),
            status=enum_value(AttendanceStatus, data.get("status"), "status"),
            notes=data.get("notes"),
            overridden_by=actor_id,
        )
        return jsonify(record.to_dict())

    @app.get("/api/attendance", endpoint="attendance_list")
    @roles_required(*HR_ROLES)
    def attendance_list():
        page = PageRequest.from_args(request.args.get("page"), request.args.get("limit"))
        return jsonify(attendance.list(_filters(), page))

    @app.get("/api/attendance/mine", endpoint="attendance_mine")
    @any_employee
    def attendance_mine():
        employee_id, _ = current_actor()
        page = PageRequest.from_args(request.args.get("page"), request.args.get("limit"))
        return jsonify(attendance.list(_filters(employee_id), page))

    @app.get("/api/attendance/calendar", endpoint="attendance_calendar")
    @any_employee
    def attendance_calendar():
        employee_id, _ = current_actor()
        year, month = _month_args(container.clock)
        return jsonify([r.to_dict() for r in attendance.calendar(employee_id, year, month)])

    @app.get("/api/attendance/calendar/full", endpoint="attendance_calendar_full")
    @any_employee
    def attendance_calendar_full():
        actor_id, role = current_actor()
        employee_id = arg_int("employee_id", actor_id) if role in HR_ROLES else actor_id
        year, month = _month_args(container.clock)
        return jsonify(attendance.calendar_with_holidays(employee_id, year, month))

    @app.get("/api/attendance/summary", endpoint="attendance_summary")
    @any_employee
    def attendance_summary():
        actor_id, role = current_actor()
        employee_id = arg_int("employee_id", actor_id) if role in HR_ROLES else actor_id
        year, month = _month_args(container.clock)
        return jsonify(attendance.summary(employee_id, year, month))

    @app.get("/api/attendance/today", endpoint="attendance_today")
    @any_employee
    def attendance_today():
        employee_id, _ = current_actor()
        return jsonify(attendance.today_status(employee_id))

    @app.get("/api/attendance/team", endpoint="attendance_team")
    @roles_required(Role.MANAGER, *HR_ROLES)
    def attendance_team():
        manager_id, _ = current_actor()
        return jsonify(attendance.team_attendance(manager_id, arg_date("date")))

    @app.get("/api/attendance/all", endpoint="attendance_all")
    @roles_required(*HR_ROLES)
    def attendance_all():
        return jsonify(attendance.all_employees_attendance(arg_date("date")))
