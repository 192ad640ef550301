from __future__ import annotations

from flask import Flask, jsonify, request, session

from ..common.datetime_utils import parse_iso_date
from ..common.http import employee_required, employer_required, error_response, json_body
from ..common.validators import require_enum, require_fields
from ..core.enums import EmploymentStatus
from ..container import Container
from .model import EmployeeQuery, EmployeeUpdate, NewEmployee

_REQUIRED = ("firstName", "lastName", "email", "employeeNumber", "department", "position", "hireDate")


def register(app: Flask, container: Container) -> None:
    @app.route("/api/employees", methods=["GET"], endpoint="api_employees_list")
    @employer_required
    def list_employees():
        try:
            status = request.args.get("status")
            query = EmployeeQuery(
                department=(request.args.get("department") or "").strip() or None,
                employment_status=require_enum(EmploymentStatus, status, "status") if status else None,
            )
            employees = container.employee_service.list(query)
        except Exception as e:
            return error_response(e)
        return jsonify([e.to_dict() for e in employees])

    @app.route("/api/employees", methods=["POST"], endpoint="api_employees_create")
    @employer_required
    def create_employee():
        try:
            data = json_body()
            require_fields(data, _REQUIRED)
            status = data.get("status")
            new = NewEmployee(
                first_name=str(data["firstName"]),
                last_name=str(data["lastName"]),
                email=str(data["email"]),
                employee_code=str(data["employeeNumber"]),
                department=str(data["department"]),
                designation=str(data["position"]),
                hired_date=parse_iso_date(str(data["hireDate"])),
                employment_status=(
                    require_enum(EmploymentStatus, status, "status") if status else EmploymentStatus.ACTIVE
                ),
                phone_number=data.get("phoneNumber"),
            )
            employee = container.employee_service.create(new, password=data.get("password") or None)
        except Exception as e:
            return error_response(e)
        return jsonify(employee.to_dict()), 201

    @app.route("/api/employees/<int:employee_id>", methods=["GET"], endpoint="api_employees_get")
    @employer_required
    def get_employee(employee_id: int):
        try:
            employee = container.employee_service.get(employee_id)
        except Exception as e:
            return error_response(e)
        return jsonify(employee.to_dict())

    @app.route("/api/employees/<int:employee_id>", methods=["PUT"], endpoint="api_employees_update")
    @employer_required
    def update_employee(employee_id: int):
        try:
            data = json_body()
            employee = container.employee_service.update(employee_id, _update_from(data))
        except Exception as e:
            return error_response(e)
        return jsonify(employee.to_dict())

    @app.route(
        "/api/employees/<int:employee_id>/password-setup", methods=["POST"], endpoint="api_employees_password_setup"
    )
    @employer_required
    def resend_password_setup(employee_id: int):
        try:
            sent = container.employee_service.resend_setup_link(employee_id)
        except Exception as e:
            return error_response(e)
        if not sent:
            return jsonify({"error": "Failed to send password setup email"}), 502
        return jsonify({"message": "Password setup email sent successfully"})

    @app.route("/api/employee/profile", methods=["GET"], endpoint="api_employee_profile")
    @employee_required
    def get_profile():
        try:
            employee = container.employee_service.get(session["employee_id"])
        except Exception as e:
            return error_response(e)
        return jsonify(employee.to_dict())

    @app.route("/api/employee/profile", methods=["PUT"], endpoint="api_employee_profile_update")
    @employee_required
    def update_profile():
        try:
            data = json_body()
            employee = container.employee_service.update_profile(
                session["employee_id"],
                first_name=data.get("firstName"),
                last_name=data.get("lastName"),
                phone_number=data.get("phoneNumber"),
            )
        except Exception as e:
            return error_response(e)
        return jsonify(employee.to_dict())

    @app.route("/api/employees/<int:employee_id>", methods=["DELETE"], endpoint="api_employees_delete")
    @employer_required
    def delete_employee(employee_id: int):
        try:
            if request.args.get("action") == "deactivate":
                employee = container.employee_service.deactivate(employee_id)
                return jsonify({"message": "Employee deactivated successfully", "employee": employee.to_dict()})

            report = container.employee_service.hard_delete(employee_id)
        except Exception as e:
            return error_response(e)
        return jsonify(
            {
                "message": "Employee and all related records permanently deleted",
                "deleted": report.deleted,
            }
        )


def _update_from(data: dict) -> EmployeeUpdate:
    def text(key):
        value = data.get(key)
        return None if value is None else str(value)

    status = data.get("status")
    hire_date = data.get("hireDate")
    return EmployeeUpdate(
        first_name=text("firstName"),
        last_name=text("lastName"),
        email=text("email"),
        employee_code=text("employeeNumber"),
        department=text("department"),
        designation=text("position"),
        hired_date=parse_iso_date(str(hire_date)) if hire_date else None,
        employment_status=require_enum(EmploymentStatus, status, "status") if status else None,
        phone_number=text("phoneNumber"),
    )
