from __future__ import annotations

from typing import Any, Iterable, Mapping

from ..core.exceptions import ValidationError


def require_non_empty(value: str, field_name: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{field_name} is required")
    return str(value).strip()


def require_fields(payload: Mapping[str, Any], field_names: Iterable[str]) -> None:
    """Fail on the first field that is missing or blank."""
    for name in field_names:
        value = payload.get(name)
        if value is None or (isinstance(value, str) and not value.strip()):
            raise ValidationError(f"{name} is required")


def require_enum(enum_cls, value: Any, field_name: str):
    """Coerce ``value`` to ``enum_cls``; string values are matched case-insensitively."""
    if isinstance(value, str) and not isinstance(value, enum_cls):
        value = value.strip().upper()
    try:
        return enum_cls(value)
    except ValueError:
        allowed = ", ".join(m.value for m in enum_cls)
        raise ValidationError(f"{field_name} must be one of: {allowed}")
