from __future__ import annotations

from flask import Flask, jsonify

from ..common.datetime_utils import parse_iso_date
from ..common.http import arg_date, arg_int, json_body, roles_required
from ..core.constants import DEFAULT_UPCOMING_HOLIDAY_DAYS
from ..core.enums import Role


def register(app: Flask, container) -> None:
    holidays = container.holiday_directory
    hr_only = roles_required(Role.HR_HEAD, Role.DIRECTOR)
    any_employee = roles_required()

    @app.get("/api/holidays", endpoint="holidays_list")
    @any_employee
    def holidays_list():
        rows = holidays.list(year=arg_int("year"), start=arg_date("start"), end=arg_date("end"))
        return jsonify([h.to_dict() for h in rows])

    @app.get("/api/holidays/upcoming", endpoint="holidays_upcoming")
    @any_employee
    def holidays_upcoming():
        rows = holidays.upcoming(arg_int("days", DEFAULT_UPCOMING_HOLIDAY_DAYS))
        return jsonify([h.to_dict() for h in rows])

    @app.get("/api/holidays/month/<int:year>/<int:month>", endpoint="holidays_month")
    @any_employee
    def holidays_month(year: int, month: int):
        return jsonify([h.to_dict() for h in holidays.for_month(year, month)])

    @app.get("/api/holidays/<int:holiday_id>", endpoint="holidays_get")
    @any_employee
    def holidays_get(holiday_id: int):
        return jsonify(holidays.get(holiday_id).to_dict())

    @app.post("/api/holidays", endpoint="holidays_create")
    @hr_only
    def holidays_create():
        data = json_body()
        holiday = holidays.create(
            holiday_date=parse_iso_date(data.get("date")),
            name=data.get("name"),
            description=data.get("description"),
        )
        return jsonify(holiday.to_dict()), 201

    @app.put("/api/holidays/<int:holiday_id>", endpoint="holidays_update")
    @hr_only
    def holidays_update(holiday_id: int):
        data = json_body()
        holiday = holidays.update(
            holiday_id,
            holiday_date=parse_iso_date(data["date"]) if data.get("date") else None,
            name=data.get("name"),
            description=data.get("description"),
        )
        return jsonify(holiday.to_dict())

    @app.delete("/api/holidays/<int:holiday_id>", endpoint="holidays_delete")
    @hr_only
    def holidays_delete(holiday_id: int):
        holidays.delete(holiday_id)
        return jsonify({"message": "Holiday deleted"})
