from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import GoalStatus, ReviewStatus, ReviewType


def _iso(value) -> Optional[str]:
    return value.isoformat() if value else None


@dataclass(frozen=True)
class ReviewNote:
    """Manager note on a review, kept in the review's ``manager_review`` JSON."""

    note_id: str
    content: str
    note_type: str
    created_at: datetime

    def to_dict(self) -> dict:
        return {
            "id": self.note_id,
            "content": self.content,
            "type": self.note_type,
            "timestamp": self.created_at.isoformat(),
        }

    @classmethod
    def from_dict(cls, raw: dict) -> "ReviewNote":
        return cls(
            note_id=str(raw["id"]),
            content=str(raw["content"]),
            note_type=str(raw.get("type") or "general"),
            created_at=datetime.fromisoformat(raw["timestamp"]),
        )


@dataclass(frozen=True)
class Goal:
    goal_id: int
    review_id: int
    title: str
    status: GoalStatus
    description: Optional[str] = None
    target_date: Optional[date] = None
    created_at: Optional[datetime] = None

    def to_dict(self) -> dict:
        return {
            "id": self.goal_id,
            "reviewId": self.review_id,
            "title": self.title,
            "description": self.description,
            "status": self.status.value,
            "targetDate": _iso(self.target_date),
        }


@dataclass(frozen=True)
class Review:
    review_id: int
    employee_id: int
    reviewer_id: int
    review_type: ReviewType
    status: ReviewStatus
    due_date: date
    summary: Optional[str] = None
    self_assessment: Optional[str] = None
    final_rating: Optional[float] = None
    created_at: Optional[datetime] = None
    submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None
    employee_name: Optional[str] = None
    reviewer_name: Optional[str] = None
    notes: tuple[ReviewNote, ...] = ()
    goals: tuple[Goal, ...] = ()

    def to_dict(self) -> dict:
        return {
            "id": self.review_id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "reviewerId": self.reviewer_id,
            "reviewerName": self.reviewer_name,
            "reviewType": self.review_type.value,
            "status": self.status.value,
            "dueDate": _iso(self.due_date),
            "summary": self.summary,
            "selfAssessment": self.self_assessment,
            "finalRating": self.final_rating,
            "createdAt": _iso(self.created_at),
            "submittedAt": _iso(self.submitted_at),
            "completedAt": _iso(self.completed_at),
            "goals": [g.to_dict() for g in self.goals],
        }


@dataclass(frozen=True)
class NewReview:
    employee_id: int
    reviewer_id: int
    due_date: date
    review_type: ReviewType = ReviewType.ANNUAL
    summary: Optional[str] = None


@dataclass(frozen=True)
class ReviewChanges:
    """Fields an update may set; ``None`` leaves a field as it is."""

    summary: Optional[str] = None
    self_assessment: Optional[str] = None
    final_rating: Optional[float] = None
    status: Optional[ReviewStatus] = None
    submitted_at: Optional[datetime] = None
    completed_at: Optional[datetime] = None


@dataclass(frozen=True)
class GoalChanges:
    title: Optional[str] = None
    description: Optional[str] = None
    status: Optional[GoalStatus] = None
    target_date: Optional[date] = None


@dataclass(frozen=True)
class ReviewQuery:
    employee_id: Optional[int] = None
    limit: int = DEFAULT_LIST_LIMIT
