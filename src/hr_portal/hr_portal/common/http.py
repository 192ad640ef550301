"""JSON helpers shared by the Flask controllers."""
from __future__ import annotations

import logging
from functools import wraps
from typing import Any, Optional

from flask import jsonify, request, session

from ..core.enums import UserType
from ..core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    DependencyError,
    DomainError,
    InvalidStateError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)

logger = logging.getLogger(__name__)

# Checked in order, so subclasses must precede their bases.
STATUS_BY_ERROR: tuple[tuple[type, int], ...] = (
    (ValidationError, 400),
    (InvalidStateError, 400),
    (AuthenticationError, 401),
    (AuthorizationError, 403),
    (NotFoundError, 404),
    (ConflictError, 409),
    (DependencyError, 409),
    (StorageUnavailableError, 503),
)


def status_for(error: Exception) -> int:
    for error_cls, status in STATUS_BY_ERROR:
        if isinstance(error, error_cls):
            return status
    return 500


def error_response(error: Exception):
    status = status_for(error)
    if status == 500:
        logger.exception("Unhandled error on %s %s", request.method, request.path)
        return jsonify({"error": "Internal server error"}), 500
    if status == 503:
        logger.warning("Storage unavailable on %s %s: %s", request.method, request.path, error)
        return jsonify({"error": "Service temporarily unavailable"}), 503
    return jsonify({"error": str(error)}), status


def json_body() -> dict[str, Any]:
    data = request.get_json(silent=True)
    if not isinstance(data, dict):
        raise ValidationError("Request body must be a JSON object")
    return data


def optional_int(value: Any, field_name: str) -> Optional[int]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        raise ValidationError(f"{field_name} must be an integer")


def login_required(view):
    @wraps(view)
    def wrapper(*args, **kwargs):
        if "user_id" not in session:
            return jsonify({"error": "Unauthorized"}), 401
        return view(*args, **kwargs)

    return wrapper


def role_required(user_type: UserType):
    def decorator(view):
        @wraps(view)
        def wrapper(*args, **kwargs):
            if "user_id" not in session:
                return jsonify({"error": "Unauthorized"}), 401
            if session.get("user_type") != user_type.value:
                return jsonify({"error": "Forbidden"}), 403
            return view(*args, **kwargs)

        return wrapper

    return decorator


employer_required = role_required(UserType.EMPLOYER)
employee_required = role_required(UserType.EMPLOYEE)
