from __future__ import annotations

from dataclasses import replace
from datetime import date, datetime, timedelta

import pytest

from src.hr_portal.hr_portal.core.enums import EmploymentStatus, GoalStatus, ReviewStatus, ReviewType
from src.hr_portal.hr_portal.core.exceptions import (
    InvalidStateError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from src.hr_portal.hr_portal.employees.model import Employee
from src.hr_portal.hr_portal.reviews.model import Goal, Review, ReviewQuery
from src.hr_portal.hr_portal.reviews.service import ReviewService

NOW = datetime(2024, 6, 3, 10, 0)


def _employee(employee_id):
    return Employee(
        employee_id=employee_id,
        user_id=100 + employee_id,
        employee_code=f"E{employee_id:03d}",
        first_name="Ann",
        last_name=f"Lee{employee_id}",
        email=f"ann{employee_id}@example.com",
        department="Finance",
        designation="Analyst",
        employment_status=EmploymentStatus.ACTIVE,
        hired_date=date(2020, 1, 1),
    )


class FakeEmployeesRepo:
    def __init__(self, *employees):
        self._by_id = {e.employee_id: e for e in employees}

    def get_by_id(self, employee_id):
        return self._by_id.get(int(employee_id))


class FakeReviewRepo:
    def __init__(self):
        self.reviews: dict[int, Review] = {}
        self.goals: dict[int, Goal] = {}
        self.unavailable = False
        self._next_review = 1
        self._next_goal = 1

    def _with_goals(self, review):
        return replace(review, goals=tuple(g for g in self.goals.values() if g.review_id == review.review_id))

    def get_by_id(self, review_id):
        review = self.reviews.get(int(review_id))
        return self._with_goals(review) if review else None

    def list(self, query):
        if self.unavailable:
            raise StorageUnavailableError("Table 'hr.reviews' doesn't exist")
        rows = [r for r in self.reviews.values() if query.employee_id in (None, r.employee_id)]
        return [self._with_goals(r) for r in sorted(rows, key=lambda r: r.review_id, reverse=True)]

    def create(self, new, *, status):
        review = Review(
            review_id=self._next_review,
            employee_id=new.employee_id,
            reviewer_id=new.reviewer_id,
            review_type=new.review_type,
            status=status,
            due_date=new.due_date,
            summary=new.summary,
            created_at=NOW,
        )
        self.reviews[review.review_id] = review
        self._next_review += 1
        return review

    def update(self, review_id, changes):
        review = self.reviews.get(int(review_id))
        if not review or review.status == ReviewStatus.COMPLETED:
            return False
        fields = {k: v for k, v in vars(changes).items() if v is not None}
        self.reviews[review.review_id] = replace(review, **fields)
        return True

    def delete(self, review_id):
        if int(review_id) not in self.reviews:
            return False
        self.goals = {k: g for k, g in self.goals.items() if g.review_id != int(review_id)}
        del self.reviews[int(review_id)]
        return True

    def append_note(self, review_id, note):
        review = self.reviews.get(int(review_id))
        if not review:
            return None
        status = ReviewStatus.IN_PROGRESS if review.status == ReviewStatus.NOT_STARTED else review.status
        self.reviews[review.review_id] = replace(review, notes=review.notes + (note,), status=status)
        return self.get_by_id(review_id)

    def get_goal(self, goal_id):
        return self.goals.get(int(goal_id))

    def create_goal(self, *, review_id, title, description, status, target_date):
        goal = Goal(
            goal_id=self._next_goal,
            review_id=review_id,
            title=title,
            description=description,
            status=status,
            target_date=target_date,
        )
        self.goals[goal.goal_id] = goal
        self._next_goal += 1
        return goal

    def update_goal(self, goal_id, changes):
        goal = self.goals.get(int(goal_id))
        if not goal:
            return None
        fields = {k: v for k, v in vars(changes).items() if v is not None}
        self.goals[goal.goal_id] = replace(goal, **fields)
        return self.goals[goal.goal_id]

    def delete_goal(self, goal_id):
        return self.goals.pop(int(goal_id), None) is not None


@pytest.fixture(autouse=True)
def clock(monkeypatch):
    monkeypatch.setattr("src.hr_portal.hr_portal.reviews.service.now_local", lambda: NOW)


@pytest.fixture()
def repo():
    return FakeReviewRepo()


@pytest.fixture()
def service(repo):
    return ReviewService(repo, FakeEmployeesRepo(_employee(1), _employee(2)))


def _create(service, **overrides):
    kwargs = dict(employee_id=1, reviewer_id=2, due_date=date(2024, 6, 30))
    kwargs.update(overrides)
    return service.create(**kwargs)


def test_create_starts_in_progress(service):
    review = _create(service, review_type="mid_year", summary="  H1 check-in ")

    assert review.status == ReviewStatus.IN_PROGRESS
    assert review.review_type == ReviewType.MID_YEAR
    assert review.summary == "H1 check-in"


@pytest.mark.parametrize("missing", ["employee_id", "reviewer_id", "due_date"])
def test_create_requires_fields(service, missing):
    with pytest.raises(ValidationError):
        _create(service, **{missing: None})


def test_create_unknown_employee_or_reviewer(service):
    with pytest.raises(NotFoundError, match="Employee not found"):
        _create(service, employee_id=9)
    with pytest.raises(NotFoundError, match="Reviewer not found"):
        _create(service, reviewer_id=9)


def test_employee_cannot_review_themselves(service):
    with pytest.raises(ValidationError):
        _create(service, reviewer_id=1)


def test_submit_then_complete_stamps_times(service):
    review = _create(service)

    submitted = service.update(review.review_id, status="SUBMITTED", self_assessment="Went well")
    assert submitted.status == ReviewStatus.SUBMITTED
    assert submitted.submitted_at == NOW
    assert submitted.self_assessment == "Went well"

    completed = service.update(review.review_id, status="COMPLETED", final_rating="4.5")
    assert completed.completed_at == NOW
    assert completed.final_rating == 4.5


def test_completed_review_is_final(service):
    review = _create(service)
    service.update(review.review_id, status="COMPLETED")

    with pytest.raises(InvalidStateError):
        service.update(review.review_id, summary="late edit")


@pytest.mark.parametrize("rating", ["0", 6, "great"])
def test_rating_must_be_in_range(service, rating):
    review = _create(service)
    with pytest.raises(ValidationError):
        service.update(review.review_id, final_rating=rating)


def test_unknown_review(service):
    with pytest.raises(NotFoundError):
        service.get(404)
    with pytest.raises(NotFoundError):
        service.update(404, summary="x")
    with pytest.raises(NotFoundError):
        service.delete(404)


def test_delete_removes_goals(service, repo):
    review = _create(service)
    service.add_goal(review.review_id, title="Ship it")

    service.delete(review.review_id)

    assert repo.reviews == {}
    assert repo.goals == {}


def test_note_is_appended_and_starts_review(service, repo):
    review = _create(service)
    repo.reviews[review.review_id] = replace(repo.reviews[review.review_id], status=ReviewStatus.NOT_STARTED)

    note, updated = service.add_note(review.review_id, "  Strong quarter  ")

    assert note.content == "Strong quarter"
    assert note.note_type == "general"
    assert note.created_at == NOW
    assert updated.status == ReviewStatus.IN_PROGRESS
    assert service.notes(review.review_id) == (note,)


def test_blank_note_is_rejected(service):
    review = _create(service)
    with pytest.raises(ValidationError, match="Notes content is required"):
        service.add_note(review.review_id, "   ")


def test_note_on_unknown_review(service):
    with pytest.raises(NotFoundError):
        service.add_note(404, "hello")


def test_goal_defaults(service):
    review = _create(service)

    goal = service.add_goal(review.review_id, title="Learn SQL")

    assert goal.status == GoalStatus.NOT_STARTED
    assert goal.target_date == NOW.date() + timedelta(days=90)
    assert service.get(review.review_id).goals == (goal,)


def test_goal_requires_title_and_review(service):
    review = _create(service)
    with pytest.raises(ValidationError):
        service.add_goal(review.review_id, title=" ")
    with pytest.raises(ValidationError):
        service.add_goal(None, title="x")
    with pytest.raises(NotFoundError):
        service.add_goal(404, title="x")


def test_update_and_delete_goal(service):
    review = _create(service)
    goal = service.add_goal(review.review_id, title="Learn SQL")

    updated = service.update_goal(goal.goal_id, status="completed", target_date=date(2024, 7, 1))
    assert updated.status == GoalStatus.COMPLETED
    assert updated.target_date == date(2024, 7, 1)
    assert updated.title == "Learn SQL"

    service.delete_goal(goal.goal_id)
    with pytest.raises(NotFoundError):
        service.get_goal(goal.goal_id)


def test_goal_title_cannot_be_blanked(service):
    review = _create(service)
    goal = service.add_goal(review.review_id, title="Learn SQL")
    with pytest.raises(ValidationError):
        service.update_goal(goal.goal_id, title="")


def test_list_by_employee_and_degrade(service, repo):
    _create(service)
    _create(service, employee_id=2, reviewer_id=1)

    assert [r.employee_id for r in service.list(ReviewQuery(employee_id=2))] == [2]

    repo.unavailable = True
    assert service.list() == []
