from __future__ import annotations

import logging
import secrets
from datetime import date, timedelta
from typing import Optional

from ..common.datetime_utils import now_local
from ..common.validators import require_enum, require_non_empty
from ..core.constants import DEFAULT_GOAL_DAYS
from ..core.enums import GoalStatus, ReviewStatus, ReviewType
from ..core.exceptions import InvalidStateError, NotFoundError, StorageUnavailableError, ValidationError
from ..employees.repository import EmployeeRepository
from .model import Goal, GoalChanges, NewReview, Review, ReviewChanges, ReviewNote, ReviewQuery
from .repository import ReviewRepository

logger = logging.getLogger(__name__)

MIN_RATING = 1.0
MAX_RATING = 5.0


def _optional_text(value: Optional[str]) -> Optional[str]:
    if value is None:
        return None
    return str(value).strip()


def _rating(value) -> Optional[float]:
    if value is None or value == "":
        return None
    try:
        rating = float(value)
    except (TypeError, ValueError):
        raise ValidationError("finalRating must be a number")
    if not MIN_RATING <= rating <= MAX_RATING:
        raise ValidationError(f"finalRating must be between {MIN_RATING:g} and {MAX_RATING:g}")
    return rating


class ReviewService:
    """Performance reviews, their manager notes and their goals.

    A review is created IN_PROGRESS and may move freely between the open
    states; once COMPLETED it can no longer be edited. The employee named as
    reviewer keeps the review alive: such an employee cannot be hard deleted.
    """

    def __init__(self, reviews: ReviewRepository, employees: EmployeeRepository):
        self._reviews = reviews
        self._employees = employees

    def create(
        self,
        *,
        employee_id: Optional[int],
        reviewer_id: Optional[int],
        due_date: Optional[date],
        review_type=None,
        summary: Optional[str] = None,
    ) -> Review:
        if employee_id is None or reviewer_id is None or due_date is None:
            raise ValidationError("Missing required fields: employeeId, reviewerId, dueDate")
        review_type = require_enum(ReviewType, review_type, "reviewType") if review_type else ReviewType.ANNUAL

        if int(employee_id) == int(reviewer_id):
            raise ValidationError("An employee cannot review themselves")
        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")
        if not self._employees.get_by_id(int(reviewer_id)):
            raise NotFoundError("Reviewer not found")

        review = self._reviews.create(
            NewReview(
                employee_id=int(employee_id),
                reviewer_id=int(reviewer_id),
                due_date=due_date,
                review_type=review_type,
                summary=(summary or "").strip() or None,
            ),
            status=ReviewStatus.IN_PROGRESS,
        )
        logger.info("Created review %s for employee %s", review.review_id, review.employee_id)
        return review

    def get(self, review_id: int) -> Review:
        review = self._reviews.get_by_id(int(review_id))
        if not review:
            raise NotFoundError("Review not found")
        return review

    def list(self, query: Optional[ReviewQuery] = None) -> list[Review]:
        try:
            return list(self._reviews.list(query or ReviewQuery()))
        except StorageUnavailableError as e:
            logger.warning("Review list degraded to empty result: %s", e)
            return []

    def update(
        self,
        review_id: int,
        *,
        summary: Optional[str] = None,
        self_assessment: Optional[str] = None,
        final_rating=None,
        status=None,
    ) -> Review:
        review = self.get(review_id)
        if review.status == ReviewStatus.COMPLETED:
            raise InvalidStateError("Completed reviews cannot be changed")

        status = require_enum(ReviewStatus, status, "status") if status else None
        now = now_local()
        changes = ReviewChanges(
            summary=_optional_text(summary),
            self_assessment=_optional_text(self_assessment),
            final_rating=_rating(final_rating),
            status=status,
            submitted_at=now if status == ReviewStatus.SUBMITTED and not review.submitted_at else None,
            completed_at=now if status == ReviewStatus.COMPLETED and not review.completed_at else None,
        )
        if not self._reviews.update(review.review_id, changes):
            raise InvalidStateError("Review was completed meanwhile")
        return self.get(review.review_id)

    def delete(self, review_id: int) -> None:
        review = self.get(review_id)
        if not self._reviews.delete(review.review_id):
            raise NotFoundError("Review not found")
        logger.info("Deleted review %s", review.review_id)

    def add_note(self, review_id: int, content: Optional[str], note_type: Optional[str] = None) -> tuple[ReviewNote, Review]:
        if not content or not str(content).strip():
            raise ValidationError("Notes content is required")
        note = ReviewNote(
            note_id=f"note_{secrets.token_hex(6)}",
            content=str(content).strip(),
            note_type=(note_type or "general").strip() or "general",
            created_at=now_local(),
        )
        review = self._reviews.append_note(int(review_id), note)
        if not review:
            raise NotFoundError("Review not found")
        return note, review

    def notes(self, review_id: int) -> tuple[ReviewNote, ...]:
        return self.get(review_id).notes

    def add_goal(
        self,
        review_id: Optional[int],
        *,
        title: Optional[str],
        description: Optional[str] = None,
        status=None,
        target_date: Optional[date] = None,
    ) -> Goal:
        if review_id is None:
            raise ValidationError("Missing required fields: reviewId and title")
        title = require_non_empty(title or "", "title")
        status = require_enum(GoalStatus, status, "status") if status else GoalStatus.NOT_STARTED
        review = self.get(review_id)

        return self._reviews.create_goal(
            review_id=review.review_id,
            title=title,
            description=(description or "").strip() or None,
            status=status,
            target_date=target_date or (now_local().date() + timedelta(days=DEFAULT_GOAL_DAYS)),
        )

    def get_goal(self, goal_id: int) -> Goal:
        goal = self._reviews.get_goal(int(goal_id))
        if not goal:
            raise NotFoundError("Goal not found")
        return goal

    def update_goal(
        self,
        goal_id: int,
        *,
        title: Optional[str] = None,
        description: Optional[str] = None,
        status=None,
        target_date: Optional[date] = None,
    ) -> Goal:
        goal = self.get_goal(goal_id)
        if title is not None and not str(title).strip():
            raise ValidationError("title cannot be empty")
        changes = GoalChanges(
            title=_optional_text(title),
            description=_optional_text(description),
            status=require_enum(GoalStatus, status, "status") if status else None,
            target_date=target_date,
        )
        updated = self._reviews.update_goal(goal.goal_id, changes)
        if not updated:
            raise NotFoundError("Goal not found")
        return updated

    def delete_goal(self, goal_id: int) -> None:
        goal = self.get_goal(goal_id)
        if not self._reviews.delete_goal(goal.goal_id):
            raise NotFoundError("Goal not found")
