from __future__ import annotations

import logging
from functools import wraps

import click
from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..core.enums import Role
from ..core.exceptions import (
    AbsenceRecordedError,
    ConflictError,
    DomainError,
    ForbiddenError,
    NotFoundError,
    ValidationError,
)
from ..core.identity import Caller
from ..core.permissions import is_allowed, require_role
from ..container import Container

logger = logging.getLogger(__name__)

_STATUS_BY_ERROR = (
    (ValidationError, 400),
    (ForbiddenError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
)


def _error_response(exc: DomainError):
    code = next((c for klass, c in _STATUS_BY_ERROR if isinstance(exc, klass)), 400)
    body = {"success": False, "message": str(exc)}
    if isinstance(exc, AbsenceRecordedError):
        body["record"] = exc.record.to_dict()
    return jsonify(body), code


def register(app: Flask, container: Container) -> None:
    service = container.attendance_service
    query = container.attendance_query

    def current_caller() -> Caller:
        try:
            role = Role(session.get("role"))
        except ValueError:
            raise ForbiddenError("Unknown role")
        try:
            user_id = int(session["user_id"])
        except (TypeError, ValueError):
            raise ForbiddenError("Invalid session identity")
        return Caller(identifier=user_id, role=role)

    def api_view(view):
        """Require a session and turn domain errors into JSON responses."""

        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"success": False, "message": "Login required"}), 401
            try:
                return view(*args, **kwargs)
            except DomainError as e:
                return _error_response(e)
            except Exception:
                logger.exception("Unhandled error in %s", view.__name__)
                return jsonify({"success": False, "message": "Internal server error"}), 500

        return wrapper

    def target_employee_id(caller: Caller) -> int:
        # Employees act on themselves; other roles may name an employee.
        if caller.role == Role.EMPLOYEE:
            return int(caller.identifier)
        payload = request.get_json(silent=True) or {}
        raw = payload.get("employee_id", caller.identifier)
        try:
            return int(raw)
        except (TypeError, ValueError):
            raise ValidationError("employee_id must be an integer")

    @app.route("/api/attendance", methods=["POST"], endpoint="attendance_create")
    @api_view
    def create_attendance():
        require_role("create_attendance", current_caller().role)
        payload = request.get_json(silent=True) or {}
        if "employee_id" not in payload:
            raise ValidationError("employee_id is required")
        record = service.create_attendance(
            employee_id=payload.get("employee_id"),
            work_date=payload.get("work_date"),
            check_in_time=payload.get("check_in_time"),
            check_out_time=payload.get("check_out_time"),
            status=payload.get("status"),
            note=payload.get("note"),
        )
        return jsonify(query.get_by_id(record.attendance_id).to_dict()), 201

    @app.route("/api/attendance", methods=["GET"], endpoint="attendance_list")
    @api_view
    def list_attendance():
        require_role("list_attendance", current_caller().role)
        return jsonify([v.to_dict() for v in query.list_all()])

    @app.route("/api/attendance/<int:attendance_id>", methods=["GET"], endpoint="attendance_get")
    @api_view
    def get_attendance(attendance_id: int):
        require_role("get_attendance", current_caller().role)
        return jsonify(query.get_by_id(attendance_id).to_dict())

    @app.route("/api/attendance/employee/<int:employee_id>", methods=["GET"], endpoint="attendance_by_employee")
    @api_view
    def list_employee_attendance(employee_id: int):
        caller = current_caller()
        if not (is_allowed("list_employee_attendance", caller.role) or int(caller.identifier) == employee_id):
            raise ForbiddenError("You may only view your own attendance")
        return jsonify([v.to_dict() for v in query.list_for_employee(employee_id)])

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="attendance_update")
    @api_view
    def update_attendance(attendance_id: int):
        require_role("update_attendance", current_caller().role)
        payload = request.get_json(silent=True)
        if not isinstance(payload, dict):
            raise ValidationError("JSON object body required")
        service.update_attendance(attendance_id, payload)
        return jsonify(query.get_by_id(attendance_id).to_dict())

    @app.route("/api/attendance/<int:attendance_id>", methods=["DELETE"], endpoint="attendance_delete")
    @api_view
    def delete_attendance(attendance_id: int):
        require_role("delete_attendance", current_caller().role)
        service.delete_attendance(attendance_id)
        return jsonify({"success": True, "message": "Attendance record deleted successfully"})

    @app.route("/api/attendance/checkin", methods=["POST"], endpoint="attendance_checkin")
    @api_view
    def checkin():
        record = service.manual_check_in(target_employee_id(current_caller()))
        return jsonify(record.to_dict())

    @app.route("/api/attendance/checkout", methods=["POST"], endpoint="attendance_checkout")
    @api_view
    def checkout():
        record = service.manual_check_out(target_employee_id(current_caller()))
        return jsonify(record.to_dict())

    @app.route("/api/attendance/geo/checkin", methods=["POST"], endpoint="attendance_geo_checkin")
    @api_view
    def geo_checkin():
        payload = request.get_json(silent=True) or {}
        result = service.auto_geo_check_in(current_caller(), payload.get("lat"), payload.get("lng"))
        body = result.to_dict()
        body["message"] = "Attendance already marked today" if result.already_marked else "Attendance marked"
        return jsonify(body), 200 if result.already_marked else 201

    @app.route("/api/attendance/geo/checkout", methods=["POST"], endpoint="attendance_geo_checkout")
    @api_view
    def geo_checkout():
        payload = request.get_json(silent=True) or {}
        record = service.auto_geo_check_out(current_caller(), payload.get("lat"), payload.get("lng"))
        return jsonify(record.to_dict())


def register_cli(app: Flask, container: Container) -> None:
    @app.cli.command("mark-absentees")
    @click.option("--date", "day", default=None, help="Day to sweep (YYYY-MM-DD), defaults to today.")
    def mark_absentees(day):
        """Mark every active employee without a record for the day as absent."""
        try:
            work_date = parse_iso_date(day) if day else None
        except ValueError:
            raise click.BadParameter("expected YYYY-MM-DD", param_hint="--date")
        created = container.attendance_service.mark_absentees(work_date)
        click.echo(f"Marked {len(created)} employee(s) absent")
