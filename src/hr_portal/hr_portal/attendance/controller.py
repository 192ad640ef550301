from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import optional_datetime, parse_iso_date
from ..common.http import employee_required, employer_required, error_response, json_body, optional_int
from ..core.exceptions import ValidationError
from ..container import Container
from .model import AttendanceQuery


def _query_from_args(args) -> AttendanceQuery:
    work_date = args.get("date")
    return AttendanceQuery(
        work_date=parse_iso_date(work_date) if work_date else None,
        employee_id=optional_int(args.get("employeeId"), "employeeId"),
        department=(args.get("department") or "").strip() or None,
    )


def register(app: Flask, container: Container) -> None:
    @app.route("/api/attendance", methods=["GET"], endpoint="api_attendance_list")
    @employer_required
    def list_attendance():
        try:
            records = container.attendance_service.query(_query_from_args(request.args))
        except Exception as e:
            return error_response(e)
        return jsonify([r.to_dict() for r in records])

    @app.route("/api/attendance", methods=["POST"], endpoint="api_attendance_create")
    @employer_required
    def clock_event():
        try:
            data = json_body()
            work_date = data.get("date")
            if not work_date:
                raise ValidationError("Employee ID and date are required")
            record = container.attendance_service.clock_event(
                employee_id=optional_int(data.get("employeeId"), "employeeId"),
                work_date=parse_iso_date(str(work_date)),
                check_in=optional_datetime(data.get("clockIn")),
                check_out=optional_datetime(data.get("clockOut")),
                status=data.get("status"),
                notes=data.get("notes"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(record.to_dict()), 201

    @app.route("/api/attendance/<int:attendance_id>", methods=["PUT"], endpoint="api_attendance_update")
    @employer_required
    def update_attendance(attendance_id: int):
        try:
            data = json_body()
            record = container.attendance_service.update_times(
                attendance_id,
                check_in=optional_datetime(data.get("clockIn")),
                check_out=optional_datetime(data.get("clockOut")),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(record.to_dict())

    @app.route("/api/attendance/stats", methods=["GET"], endpoint="api_attendance_stats")
    @employer_required
    def attendance_stats():
        try:
            stats = container.attendance_service.stats(_query_from_args(request.args))
        except Exception as e:
            return error_response(e)
        return jsonify(stats.to_dict())

    @app.route("/api/employee/attendance", methods=["GET"], endpoint="api_my_attendance")
    @employee_required
    def my_attendance():
        try:
            query = AttendanceQuery(employee_id=int(session["employee_id"]))
            records = container.attendance_service.query(query)
        except Exception as e:
            return error_response(e)
        return jsonify([r.to_dict() for r in records])
