from __future__ import annotations

from flask import Flask, jsonify, request

from ..common.datetime_utils import month_key, previous_month
from ..common.http import arg_int, current_actor, json_body, roles_required
from ..core.enums import Role

HR_ROLES = (Role.HR_HEAD, Role.DIRECTOR)


def register(app: Flask, container) -> None:
    payroll = container.payroll_service
    clock = container.clock
    hr_only = roles_required(*HR_ROLES)

    def _month_arg() -> str:
        return request.args.get("month") or month_key(*previous_month(clock.today()))

    @app.post("/api/payroll/generate", endpoint="payroll_generate")
    @hr_only
    def payroll_generate():
        data = json_body()
        month = data.get("month") or month_key(*previous_month(clock.today()))
        return jsonify(payroll.generate(month).to_dict())

    @app.post("/api/payroll/payslips/<int:payslip_id>/regenerate", endpoint="payroll_regenerate")
    @hr_only
    def payroll_regenerate(payslip_id: int):
        return jsonify(payroll.regenerate(payslip_id).to_dict())

    @app.get("/api/payroll/payslips", endpoint="payroll_list")
    @hr_only
    def payroll_list():
        return jsonify(payroll.list_for_month(_month_arg()))

    @app.get("/api/payroll/payslips/<int:payslip_id>", endpoint="payroll_get")
    @roles_required()
    def payroll_get(payslip_id: int):
        employee_id, role = current_actor()
        owner = None if role in HR_ROLES else employee_id
        return jsonify(payroll.get(payslip_id, employee_id=owner))

    @app.get("/api/payroll/mine", endpoint="payroll_mine")
    @roles_required()
    def payroll_mine():
        employee_id, _ = current_actor()
        return jsonify(payroll.my_payslips(employee_id, year=arg_int("year")))

    @app.get("/api/payroll/stats", endpoint="payroll_stats")
    @hr_only
    def payroll_stats():
        return jsonify(payroll.stats(_month_arg()))

    @app.get("/api/payroll/working-days", endpoint="payroll_working_days_get")
    @hr_only
    def payroll_working_days_get():
        month = request.args.get("month") or month_key(clock.today().year, clock.today().month)
        return jsonify(payroll.working_days_config(month).to_dict())

    @app.put("/api/payroll/working-days", endpoint="payroll_working_days_set")
    @hr_only
    def payroll_working_days_set():
        actor_id, _ = current_actor()
        data = json_body()
        config = payroll.set_working_days(
            data.get("month"),
            data.get("working_days"),
            overrides=data.get("overrides") or (),
            notes=data.get("notes"),
            set_by=actor_id,
        )
        return jsonify(config.to_dict())

    @app.post("/api/payroll/accrual", endpoint="payroll_accrual")
    @hr_only
    def payroll_accrual():
        data = json_body()
        month = data.get("month") or month_key(*previous_month(clock.today()))
        return jsonify(payroll.process_earned_leave_accrual(month))
