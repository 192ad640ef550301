from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from ..core.exceptions import ValidationError


def parse_iso_date(value: str) -> date:
    """Parse YYYY-MM-DD (a longer ISO timestamp is cut to its date part)."""
    try:
        return datetime.strptime(value.strip()[:10], "%Y-%m-%d").date()
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid date: {value!r}")


def parse_iso_datetime(value: str) -> datetime:
    """Parse an ISO 8601 timestamp into a naive local datetime.

    A trailing 'Z' or an explicit offset is converted to server local time, so
    every parsed value can be compared with every other one.
    """
    try:
        v = value.strip()
        if v.endswith("Z"):
            v = v[:-1] + "+00:00"
        parsed = datetime.fromisoformat(v)
    except (AttributeError, ValueError):
        raise ValidationError(f"Invalid timestamp: {value!r}")
    return to_naive_local(parsed)


def to_naive_local(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone().replace(tzinfo=None)


def optional_datetime(value: Optional[str]) -> Optional[datetime]:
    if value is None or not str(value).strip():
        return None
    return parse_iso_datetime(str(value))


def now_local() -> datetime:
    """Current local time; a module-level function so tests can patch it."""
    return datetime.now()
