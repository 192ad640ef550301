from __future__ import annotations

import json
from datetime import date
from typing import Optional, Sequence

from ..core.enums import GoalStatus, ReviewStatus, ReviewType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import Goal, GoalChanges, NewReview, Review, ReviewChanges, ReviewNote, ReviewQuery
from .repository import ReviewRepository

_SELECT = """
    SELECT r.review_id, r.employee_id, r.reviewer_id, r.review_type, r.status,
           r.due_date, r.summary, r.self_assessment, r.manager_review, r.final_rating,
           r.created_at, r.submitted_at, r.completed_at,
           e.first_name, e.last_name,
           rv.first_name AS reviewer_first_name, rv.last_name AS reviewer_last_name
    FROM reviews r
    JOIN employees e ON e.employee_id = r.employee_id
    JOIN employees rv ON rv.employee_id = r.reviewer_id
"""

_SELECT_GOAL = """
    SELECT goal_id, review_id, title, description, status, target_date, created_at
    FROM goals
"""


def _name(first: Optional[str], last: Optional[str]) -> Optional[str]:
    return f"{first or ''} {last or ''}".strip() or None


def _load_notes(raw) -> tuple[ReviewNote, ...]:
    if not raw:
        return ()
    data = json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw
    return tuple(ReviewNote.from_dict(n) for n in (data or {}).get("notes", []))


def _to_goal(r: dict) -> Goal:
    return Goal(
        goal_id=int(r["goal_id"]),
        review_id=int(r["review_id"]),
        title=r["title"],
        description=r.get("description"),
        status=GoalStatus(r["status"]),
        target_date=r.get("target_date"),
        created_at=r.get("created_at"),
    )


def _to_review(r: dict, goals: Sequence[Goal] = ()) -> Review:
    rating = r.get("final_rating")
    return Review(
        review_id=int(r["review_id"]),
        employee_id=int(r["employee_id"]),
        reviewer_id=int(r["reviewer_id"]),
        review_type=ReviewType(r["review_type"]),
        status=ReviewStatus(r["status"]),
        due_date=r["due_date"],
        summary=r.get("summary"),
        self_assessment=r.get("self_assessment"),
        final_rating=float(rating) if rating is not None else None,
        created_at=r.get("created_at"),
        submitted_at=r.get("submitted_at"),
        completed_at=r.get("completed_at"),
        employee_name=_name(r.get("first_name"), r.get("last_name")),
        reviewer_name=_name(r.get("reviewer_first_name"), r.get("reviewer_last_name")),
        notes=_load_notes(r.get("manager_review")),
        goals=tuple(goals),
    )


def _goals_by_review(cur, review_ids: Sequence[int]) -> dict[int, list[Goal]]:
    out: dict[int, list[Goal]] = {rid: [] for rid in review_ids}
    if not review_ids:
        return out
    placeholders = ",".join(["%s"] * len(review_ids))
    cur.execute(f"{_SELECT_GOAL} WHERE review_id IN ({placeholders}) ORDER BY goal_id", tuple(review_ids))
    for r in fetchall(cur):
        out[int(r["review_id"])].append(_to_goal(r))
    return out


class MySQLReviewRepository(ReviewRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def _get(self, cur, review_id: int) -> Optional[Review]:
        cur.execute(f"{_SELECT} WHERE r.review_id=%s", (int(review_id),))
        r = fetchone(cur)
        if not r:
            return None
        return _to_review(r, _goals_by_review(cur, [int(review_id)])[int(review_id)])

    def get_by_id(self, review_id: int) -> Optional[Review]:
        with db_cursor(self._conn_factory) as (_, cur):
            return self._get(cur, review_id)

    def list(self, query: ReviewQuery) -> Sequence[Review]:
        clauses: list[str] = []
        params: list[object] = []
        if query.employee_id is not None:
            clauses.append("r.employee_id=%s")
            params.append(int(query.employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {build_where(clauses)} ORDER BY r.created_at DESC LIMIT %s",
                tuple(params + [int(query.limit)]),
            )
            rows = fetchall(cur)
            goals = _goals_by_review(cur, [int(r["review_id"]) for r in rows])
            return [_to_review(r, goals[int(r["review_id"])]) for r in rows]

    def create(self, new: NewReview, *, status: ReviewStatus) -> Review:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO reviews(employee_id, reviewer_id, review_type, status, due_date, summary)
                VALUES(%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(new.employee_id),
                    int(new.reviewer_id),
                    new.review_type.value,
                    status.value,
                    new.due_date,
                    new.summary,
                ),
            )
            return self._get(cur, int(cur.lastrowid))

    def update(self, review_id: int, changes: ReviewChanges) -> bool:
        columns = [
            ("summary", changes.summary),
            ("self_assessment", changes.self_assessment),
            ("final_rating", changes.final_rating),
            ("status", changes.status.value if changes.status else None),
            ("submitted_at", changes.submitted_at),
            ("completed_at", changes.completed_at),
        ]
        assignments = [(c, v) for c, v in columns if v is not None]

        with db_cursor(self._conn_factory) as (_, cur):
            if not assignments:
                cur.execute(
                    "SELECT review_id FROM reviews WHERE review_id=%s AND status<>%s",
                    (int(review_id), ReviewStatus.COMPLETED.value),
                )
                return fetchone(cur) is not None
            cur.execute(
                f"""
                UPDATE reviews SET {', '.join(f'{c}=%s' for c, _ in assignments)}
                WHERE review_id=%s AND status<>%s
                """,
                (*[v for _, v in assignments], int(review_id), ReviewStatus.COMPLETED.value),
            )
            return cur.rowcount > 0

    def delete(self, review_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM goals WHERE review_id=%s", (int(review_id),))
            cur.execute("DELETE FROM reviews WHERE review_id=%s", (int(review_id),))
            return cur.rowcount > 0

    def append_note(self, review_id: int, note: ReviewNote) -> Optional[Review]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT manager_review, status FROM reviews WHERE review_id=%s FOR UPDATE",
                (int(review_id),),
            )
            r = fetchone(cur)
            if not r:
                return None

            raw = r.get("manager_review")
            data = (json.loads(raw) if isinstance(raw, (str, bytes, bytearray)) else raw) or {}
            data.setdefault("notes", []).append(note.to_dict())
            status = ReviewStatus(r["status"])
            if status == ReviewStatus.NOT_STARTED:
                status = ReviewStatus.IN_PROGRESS

            cur.execute(
                "UPDATE reviews SET manager_review=%s, status=%s WHERE review_id=%s",
                (json.dumps(data), status.value, int(review_id)),
            )
            return self._get(cur, review_id)

    def get_goal(self, goal_id: int) -> Optional[Goal]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT_GOAL} WHERE goal_id=%s", (int(goal_id),))
            r = fetchone(cur)
            return _to_goal(r) if r else None

    def create_goal(
        self,
        *,
        review_id: int,
        title: str,
        description: Optional[str],
        status: GoalStatus,
        target_date: Optional[date],
    ) -> Goal:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO goals(review_id, title, description, status, target_date)
                VALUES(%s,%s,%s,%s,%s)
                """,
                (int(review_id), title, description, status.value, target_date),
            )
            cur.execute(f"{_SELECT_GOAL} WHERE goal_id=%s", (int(cur.lastrowid),))
            return _to_goal(fetchone(cur))

    def update_goal(self, goal_id: int, changes: GoalChanges) -> Optional[Goal]:
        columns = [
            ("title", changes.title),
            ("description", changes.description),
            ("status", changes.status.value if changes.status else None),
            ("target_date", changes.target_date),
        ]
        assignments = [(c, v) for c, v in columns if v is not None]

        with db_cursor(self._conn_factory) as (_, cur):
            if assignments:
                cur.execute(
                    f"UPDATE goals SET {', '.join(f'{c}=%s' for c, _ in assignments)} WHERE goal_id=%s",
                    (*[v for _, v in assignments], int(goal_id)),
                )
            cur.execute(f"{_SELECT_GOAL} WHERE goal_id=%s", (int(goal_id),))
            r = fetchone(cur)
            return _to_goal(r) if r else None

    def delete_goal(self, goal_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute("DELETE FROM goals WHERE goal_id=%s", (int(goal_id),))
            return cur.rowcount > 0
