from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import parse_iso_date
from ..common.http import arg_date, arg_int, current_actor, enum_value, json_body, roles_required
from ..common.pagination import PageRequest
from ..core.enums import LeaveStatus, LeaveType, Role
from .model import LeaveFilter

HR_ROLES = (Role.HR_HEAD, Role.DIRECTOR)
APPROVER_ROLES = (Role.MANAGER, Role.HR_HEAD, Role.DIRECTOR)


def _filters_from_args(**overrides) -> LeaveFilter:
    status = request.args.get("status")
    leave_type = request.args.get("leave_type")
    values = {
        "employee_id": arg_int("employee_id"),
        "status": enum_value(LeaveStatus, status, "status") if status else None,
        "leave_type": enum_value(LeaveType, leave_type, "leave_type") if leave_type else None,
        "start_date": arg_date("start_date"),
        "end_date": arg_date("end_date"),
    }
    values.update(overrides)
    return LeaveFilter(**values)


def register(app: Flask, container) -> None:
    workflow = container.leave_workflow
    ledger = container.balance_ledger
    analytics = container.leave_analytics
    clock = container.clock
    any_employee = roles_required()

    @app.post("/api/leaves", endpoint="leave_submit")
    @any_employee
    def leave_submit():
        employee_id, _ = current_actor()
        data = json_body()
        leave = workflow.submit(
            employee_id=employee_id,
            leave_type=enum_value(LeaveType, data.get("leave_type"), "leave_type"),
            start_date=parse_iso_date(data.get("start_date")),
            end_date=parse_iso_date(data.get("end_date")),
            reason=data.get("reason"),
        )
        return jsonify(leave.to_dict()), 201

    @app.get("/api/leaves", endpoint="leave_list")
    @roles_required(*HR_ROLES)
    def leave_list():
        page = PageRequest.from_args(request.args.get("page"), request.args.get("limit"))
        return jsonify(workflow.list(_filters_from_args(), page))

    @app.get("/api/leaves/mine", endpoint="leave_mine")
    @any_employee
    def leave_mine():
        employee_id, _ = current_actor()
        page = PageRequest.from_args(request.args.get("page"), request.args.get("limit"))
        return jsonify(workflow.list(_filters_from_args(employee_id=employee_id), page))

    @app.get("/api/leaves/pending/manager", endpoint="leave_pending_manager")
    @roles_required(*APPROVER_ROLES)
    def leave_pending_manager():
        employee_id, _ = current_actor()
        return jsonify([l.to_dict() for l in workflow.pending_for_manager(employee_id)])

    @app.get("/api/leaves/pending/hr", endpoint="leave_pending_hr")
    @roles_required(*HR_ROLES)
    def leave_pending_hr():
        return jsonify([l.to_dict() for l in workflow.pending_for_hr()])

    @app.get("/api/leaves/<int:request_id>", endpoint="leave_get")
    @any_employee
    def leave_get(request_id: int):
        return jsonify(workflow.get(request_id).to_dict())

    @app.post("/api/leaves/<int:request_id>/approve", endpoint="leave_approve")
    @roles_required(*APPROVER_ROLES)
    def leave_approve(request_id: int):
        employee_id, _ = current_actor()
        return jsonify(workflow.approve(request_id=request_id, approver_id=employee_id).to_dict())

    @app.post("/api/leaves/<int:request_id>/reject", endpoint="leave_reject")
    @roles_required(*APPROVER_ROLES)
    def leave_reject(request_id: int):
        employee_id, _ = current_actor()
        data = json_body()
        leave = workflow.reject(request_id=request_id, approver_id=employee_id, reason=data.get("reason"))
        return jsonify(leave.to_dict())

    @app.delete("/api/leaves/<int:request_id>", endpoint="leave_cancel")
    @any_employee
    def leave_cancel(request_id: int):
        employee_id, _ = current_actor()
        workflow.cancel(request_id=request_id, employee_id=employee_id)
        return jsonify({"message": "Leave request cancelled"})

    @app.get("/api/leaves/balance", endpoint="leave_balance")
    @any_employee
    def leave_balance():
        employee_id, _ = current_actor()
        return jsonify(ledger.get_balance(employee_id).to_dict())

    @app.get("/api/leaves/balances", endpoint="leave_balances")
    @roles_required(*HR_ROLES)
    def leave_balances():
        return jsonify(list(ledger.list_balances()))

    @app.post("/api/leaves/balances/reset", endpoint="leave_balances_reset")
    @roles_required(*HR_ROLES)
    def leave_balances_reset():
        return jsonify(ledger.reset_all())

    @app.post("/api/leaves/balances/<int:employee_id>/adjust", endpoint="leave_balance_adjust")
    @roles_required(*HR_ROLES)
    def leave_balance_adjust(employee_id: int):
        data = json_body()
        leave_type = enum_value(LeaveType, data.get("leave_type"), "leave_type")
        return jsonify(ledger.adjust(employee_id, leave_type, data.get("adjustment"), data.get("reason")))

    @app.get("/api/leaves/analytics", endpoint="leave_analytics")
    @roles_required(*HR_ROLES)
    def leave_analytics():
        return jsonify(analytics.analytics(arg_int("year", clock.today().year), arg_int("month")))

    @app.get("/api/leaves/analytics/trend", endpoint="leave_trend")
    @roles_required(*HR_ROLES)
    def leave_trend():
        return jsonify(analytics.monthly_trend(arg_int("year", clock.today().year)))

    @app.get("/api/leaves/team-calendar", endpoint="leave_team_calendar")
    @roles_required(*APPROVER_ROLES)
    def leave_team_calendar():
        employee_id, _ = current_actor()
        today = clock.today()
        return jsonify(
            analytics.team_calendar(employee_id, arg_int("year", today.year), arg_int("month", today.month))
        )

    @app.get("/api/leaves/report", endpoint="leave_report")
    @roles_required(*HR_ROLES)
    def leave_report():
        return jsonify(analytics.leave_report(arg_int("year", clock.today().year), arg_int("month")))

    @app.get("/api/leaves/stats/roles", endpoint="leave_role_stats")
    @roles_required(*HR_ROLES)
    def leave_role_stats():
        return jsonify(analytics.leave_stats_by_role())
