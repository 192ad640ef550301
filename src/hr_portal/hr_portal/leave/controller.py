from __future__ import annotations

from typing import Optional

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import employee_required, employer_required, error_response, json_body, optional_int
from ..common.validators import require_enum
from ..core.enums import LeaveStatus, LeaveType
from ..container import Container
from .model import LeaveQuery


def _optional_date(value: Optional[str]):
    if value is None or not str(value).strip():
        return None
    return parse_iso_date(str(value))


def _create_from_payload(container: Container, data: dict, *, employee_id):
    return container.leave_service.create(
        employee_id=employee_id,
        leave_type=data.get("type") or data.get("leaveType"),
        start_date=_optional_date(data.get("startDate")),
        end_date=_optional_date(data.get("endDate")),
        reason=data.get("reason"),
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/leave", methods=["GET"], endpoint="api_leave_list")
    @employer_required
    def list_leave():
        try:
            args = request.args
            status = args.get("status")
            leave_type = args.get("type")
            query = LeaveQuery(
                status=require_enum(LeaveStatus, status, "status") if status and status != "all" else None,
                leave_type=require_enum(LeaveType, leave_type, "type") if leave_type and leave_type != "all" else None,
                employee_id=optional_int(args.get("employeeId"), "employeeId"),
            )
            leaves = container.leave_service.list(query)
        except Exception as e:
            return error_response(e)
        return jsonify([leave.to_dict() for leave in leaves])

    @app.route("/api/leave", methods=["POST"], endpoint="api_leave_create")
    @employer_required
    def create_leave():
        try:
            data = json_body()
            leave = _create_from_payload(
                container,
                data,
                employee_id=optional_int(data.get("employeeId"), "employeeId"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(leave.to_dict()), 201

    @app.route("/api/leave/<int:leave_id>", methods=["PUT"], endpoint="api_leave_update")
    @employer_required
    def update_leave(leave_id: int):
        try:
            data = json_body()
            leave = container.leave_service.update_status(
                leave_id,
                data.get("status"),
                approver_notes=data.get("approverNotes"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(leave.to_dict())

    @app.route("/api/leave/<int:leave_id>", methods=["DELETE"], endpoint="api_leave_delete")
    @employer_required
    def delete_leave(leave_id: int):
        try:
            container.leave_service.delete(leave_id)
        except Exception as e:
            return error_response(e)
        return jsonify({"message": "Leave request deleted successfully"})

    @app.route("/api/leave/stats", methods=["GET"], endpoint="api_leave_stats")
    @employer_required
    def leave_stats():
        try:
            employee_id = optional_int(request.args.get("employeeId"), "employeeId")
            stats = container.leave_service.stats(employee_id=employee_id)
        except Exception as e:
            return error_response(e)
        return jsonify(stats.to_dict())

    @app.route("/api/employee/leave", methods=["GET"], endpoint="api_my_leave")
    @employee_required
    def my_leave():
        try:
            leaves = container.leave_service.list(LeaveQuery(employee_id=int(session["employee_id"])))
        except Exception as e:
            return error_response(e)
        return jsonify([leave.to_dict() for leave in leaves])

    @app.route("/api/employee/leave", methods=["POST"], endpoint="api_my_leave_create")
    @employee_required
    def create_my_leave():
        try:
            leave = _create_from_payload(container, json_body(), employee_id=int(session["employee_id"]))
        except Exception as e:
            return error_response(e)
        return jsonify(leave.to_dict()), 201
