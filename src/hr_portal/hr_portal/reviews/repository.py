from __future__ import annotations

from datetime import date
from typing import Optional, Protocol, Sequence

from ..core.enums import GoalStatus, ReviewStatus
from .model import Goal, GoalChanges, NewReview, Review, ReviewChanges, ReviewNote, ReviewQuery


class ReviewRepository(Protocol):
    def get_by_id(self, review_id: int) -> Optional[Review]:
        """The review with its notes and goals."""

        raise NotImplementedError

    def list(self, query: ReviewQuery) -> Sequence[Review]:
        """Newest first, goals included."""

        raise NotImplementedError

    def create(self, new: NewReview, *, status: ReviewStatus) -> Review:
        raise NotImplementedError

    def update(self, review_id: int, changes: ReviewChanges) -> bool:
        """Apply the non-None fields unless the review is COMPLETED; False otherwise."""

        raise NotImplementedError

    def delete(self, review_id: int) -> bool:
        """Remove the review and its goals in one transaction."""

        raise NotImplementedError

    def append_note(self, review_id: int, note: ReviewNote) -> Optional[Review]:
        """Add a note under a row lock; a NOT_STARTED review moves to IN_PROGRESS."""

        raise NotImplementedError

    def get_goal(self, goal_id: int) -> Optional[Goal]:
        raise NotImplementedError

    def create_goal(
        self,
        *,
        review_id: int,
        title: str,
        description: Optional[str],
        status: GoalStatus,
        target_date: Optional[date],
    ) -> Goal:
        raise NotImplementedError

    def update_goal(self, goal_id: int, changes: GoalChanges) -> Optional[Goal]:
        raise NotImplementedError

    def delete_goal(self, goal_id: int) -> bool:
        raise NotImplementedError
