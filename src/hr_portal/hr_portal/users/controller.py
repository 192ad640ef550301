from __future__ import annotations

from datetime import timedelta

from flask import Flask, jsonify, request, session

from ..common.http import error_response, json_body, login_required
from ..core.constants import DEFAULT_SESSION_DAYS
from ..core.exceptions import StorageUnavailableError
from ..container import Container


def register(app: Flask, container: Container) -> None:
    app.permanent_session_lifetime = timedelta(days=DEFAULT_SESSION_DAYS)

    @app.route("/api/auth/login", methods=["POST"], endpoint="api_login")
    def login():
        try:
            data = json_body()
            s_user = container.auth_service.authenticate(
                str(data.get("email") or ""),
                str(data.get("password") or ""),
            )
        except Exception as e:
            return error_response(e)

        session.clear()
        session.permanent = bool(data.get("rememberMe"))
        session["user_id"] = s_user.user_id
        session["email"] = s_user.email
        session["user_type"] = s_user.user_type.value
        if s_user.employee_id is not None:
            session["employee_id"] = s_user.employee_id

        return jsonify(
            {
                "userId": s_user.user_id,
                "email": s_user.email,
                "userType": s_user.user_type.value,
                "employeeId": s_user.employee_id,
            }
        )

    @app.route("/api/auth/logout", methods=["POST"], endpoint="api_logout")
    def logout():
        session.clear()
        return jsonify({"message": "Logged out"})

    @app.route("/api/auth/me", methods=["GET"], endpoint="api_me")
    @login_required
    def me():
        return jsonify(
            {
                "userId": session["user_id"],
                "email": session.get("email"),
                "userType": session.get("user_type"),
                "employeeId": session.get("employee_id"),
            }
        )

    @app.route("/api/auth/setup-password", methods=["GET"], endpoint="api_setup_password_check")
    def check_setup_token():
        try:
            user = container.password_service.check_setup_token(request.args.get("token"))
        except Exception as e:
            return error_response(e)
        return jsonify({"valid": True, "email": user.email, "userType": user.user_type.value})

    @app.route("/api/auth/setup-password", methods=["POST"], endpoint="api_setup_password")
    def setup_password():
        try:
            data = json_body()
            user = container.password_service.setup_password(data.get("token"), data.get("password"))
        except Exception as e:
            return error_response(e)
        return jsonify({"message": "Password set successfully", "userType": user.user_type.value})

    @app.route("/api/auth/forgot-password", methods=["POST"], endpoint="api_forgot_password")
    def forgot_password():
        try:
            data = json_body()
            container.password_service.request_reset(data.get("email"), data.get("userType"))
        except Exception as e:
            return error_response(e)
        return jsonify({"message": "If an account exists, a password reset email has been sent."})

    @app.route("/api/auth/reset-password", methods=["POST"], endpoint="api_reset_password")
    def reset_password():
        try:
            data = json_body()
            container.password_service.reset_password(data.get("token"), data.get("password"))
        except Exception as e:
            return error_response(e)
        return jsonify({"message": "Password reset successful"})

    @app.route("/api/health", methods=["GET"], endpoint="api_health")
    def health():
        try:
            container.ping_database()
        except StorageUnavailableError:
            return jsonify({"status": "degraded", "database": "unavailable"}), 503
        return jsonify({"status": "ok", "database": "ok"})
