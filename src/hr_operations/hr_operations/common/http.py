from __future__ import annotations

import logging
from functools import wraps
from typing import Optional

from flask import Flask, jsonify, request, session

from ..core.enums import Role
from ..core.exceptions import (
    AuthorizationError,
    ConflictError,
    DomainError,
    InsufficientBalanceError,
    NotFoundError,
    ValidationError,
)
from .datetime_utils import parse_iso_date

log = logging.getLogger(__name__)

STATUS_BY_ERROR = (
    (InsufficientBalanceError, 422),
    (ValidationError, 400),
    (ConflictError, 409),
    (AuthorizationError, 403),
    (NotFoundError, 404),
)


def status_for(exc: DomainError) -> int:
    for cls, status in STATUS_BY_ERROR:
        if isinstance(exc, cls):
            return status
    return 400


def register_error_handlers(app: Flask) -> None:
    @app.errorhandler(DomainError)
    def _domain_error(exc: DomainError):
        status = status_for(exc)
        log.debug("%s %s -> %s %s", request.method, request.path, status, exc)
        return jsonify({"error": type(exc).__name__, "message": str(exc)}), status


def current_actor() -> tuple[int, Role]:
    """Employee id and role put in the session by the authentication module."""
    employee_id = session.get("employee_id")
    role = session.get("role")
    if employee_id is None or role is None:
        raise AuthorizationError("Authentication required")
    return int(employee_id), Role(role)


def roles_required(*roles: Role):
    allowed = frozenset(roles)

    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            _, role = current_actor()
            if allowed and role not in allowed:
                raise AuthorizationError("You do not have permission for this action")
            return view(*args, **kwargs)

        return wrapper

    return decorator


def json_body() -> dict:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("JSON object body is required")
    return data


def arg_int(name: str, default: Optional[int] = None) -> Optional[int]:
    value = request.args.get(name)
    if value in (None, ""):
        return default
    try:
        return int(value)
    except ValueError:
        raise ValidationError(f"{name} must be an integer")


def arg_date(name: str):
    value = request.args.get(name)
    return parse_iso_date(value) if value else None


def enum_value(enum_cls, value, field_name: str):
    try:
        return enum_cls(str(value).upper())
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")
