"""Calendar-day range helpers used by leave and attendance rules.

All ranges are closed: both the start and the end day belong to the range.
"""
from __future__ import annotations

from dataclasses import dataclass
from datetime import date, timedelta
from typing import Any, Collection, Iterable, Optional

from ..core.exceptions import InvalidRangeError


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date
    status: Optional[Any] = None


def overlaps(
    candidate_start: date,
    candidate_end: date,
    existing: Iterable[DateRange],
    active_statuses: Collection[Any],
) -> bool:
    """Return True if the candidate shares at least one day with an active range.

    Ranges whose status is not in ``active_statuses`` are ignored.
    """
    for r in existing:
        if r.status not in active_statuses:
            continue
        if ranges_intersect(candidate_start, candidate_end, r.start, r.end):
            return True
    return False


def ranges_intersect(start_a: date, end_a: date, start_b: date, end_b: date) -> bool:
    return start_a <= end_b and end_a >= start_b


def _require_ordered(start: date, end: date) -> None:
    if end < start:
        raise InvalidRangeError("End date must not be before start date")


def inclusive_days(start: date, end: date) -> int:
    """Number of calendar days from start to end, both included."""
    _require_ordered(start, end)
    return (end - start).days + 1


def working_days(start: date, end: date) -> int:
    """Like inclusive_days but Saturdays and Sundays are not counted."""
    _require_ordered(start, end)
    count = 0
    day = start
    while day <= end:
        # Monday=0 .. Sunday=6
        if day.weekday() < 5:
            count += 1
        day += timedelta(days=1)
    return count
