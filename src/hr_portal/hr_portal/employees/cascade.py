"""Delete order for permanently removing an employee.

Each step names the table it empties, the table its rows point to through a
foreign key, and which id of the employee selects its rows. A step must come
before the step of the table it references.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Sequence


@dataclass(frozen=True)
class CascadeStep:
    table: str
    references: Optional[str]
    key: str = "employee_id"


HARD_DELETE_PLAN: tuple[CascadeStep, ...] = (
    CascadeStep("goals", references="reviews"),
    CascadeStep("reviews", references="employees"),
    CascadeStep("user_badges", references="employees"),
    CascadeStep("enrollments", references="employees"),
    CascadeStep("documents", references="employees"),
    CascadeStep("leave_requests", references="employees"),
    CascadeStep("attendance_records", references="employees"),
    CascadeStep("employees", references="users"),
    CascadeStep("users", references=None, key="user_id"),
)


def validate_plan(plan: Sequence[CascadeStep]) -> None:
    """Raise ValueError unless every child step precedes its parent's step."""
    position = {}
    for i, step in enumerate(plan):
        if step.table in position:
            raise ValueError(f"Table {step.table!r} appears twice in the delete plan")
        position[step.table] = i

    for i, step in enumerate(plan):
        if step.references is None:
            continue
        parent = position.get(step.references)
        if parent is not None and parent < i:
            raise ValueError(f"{step.table!r} must be deleted before {step.references!r}")
