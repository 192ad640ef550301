from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Mapping, Optional, Sequence

from ..core.constants import ACTIVE_LEAVE_STATUSES
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import DuplicateRecordError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import LeaveQuery, LeaveRequest
from .repository import LeaveRepository

_SELECT = """
    SELECT l.leave_id, l.employee_id, l.leave_type, l.start_date, l.end_date,
           l.total_days, l.reason, l.status, l.created_at,
           l.approved_date, l.approver_notes,
           e.first_name, e.last_name, e.department
    FROM leave_requests l
    JOIN employees e ON e.employee_id = l.employee_id
"""


def _to_leave(r: dict) -> LeaveRequest:
    return LeaveRequest(
        leave_id=int(r["leave_id"]),
        employee_id=int(r["employee_id"]),
        leave_type=LeaveType(r["leave_type"]),
        start_date=r["start_date"],
        end_date=r["end_date"],
        total_days=int(r["total_days"]),
        reason=r["reason"],
        status=LeaveStatus(r["status"]),
        created_at=r["created_at"],
        approved_date=r.get("approved_date"),
        approver_notes=r.get("approver_notes"),
        employee_name=f"{r.get('first_name') or ''} {r.get('last_name') or ''}".strip() or None,
        department=r.get("department"),
    )


def _in_clause(values: Collection) -> str:
    return ",".join(["%s"] * len(values))


class MySQLLeaveRepository(LeaveRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE l.leave_id=%s", (int(leave_id),))
            r = fetchone(cur)
            return _to_leave(r) if r else None

    def list(self, query: LeaveQuery) -> Sequence[LeaveRequest]:
        clauses: list[str] = []
        params: list[object] = []

        if query.status is not None:
            clauses.append("l.status=%s")
            params.append(query.status.value)
        if query.leave_type is not None:
            clauses.append("l.leave_type=%s")
            params.append(query.leave_type.value)
        if query.employee_id is not None:
            clauses.append("l.employee_id=%s")
            params.append(int(query.employee_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {build_where(clauses)} ORDER BY l.created_at DESC LIMIT %s",
                tuple(params + [int(query.limit)]),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def list_for_employee(self, employee_id: int, *, statuses: Collection[LeaveStatus]) -> Sequence[LeaveRequest]:
        if not statuses:
            return []
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE l.employee_id=%s AND l.status IN ({_in_clause(statuses)}) ORDER BY l.start_date",
                (int(employee_id), *[s.value for s in statuses]),
            )
            return [_to_leave(r) for r in fetchall(cur)]

    def create(
        self,
        *,
        employee_id: int,
        leave_type: LeaveType,
        start_date: date,
        end_date: date,
        total_days: int,
        reason: str,
    ) -> LeaveRequest:
        active = sorted(s.value for s in ACTIVE_LEAVE_STATUSES)
        with db_cursor(self._conn_factory) as (_, cur):
            # Serialize concurrent requests of one employee on the employee row,
            # then re-check the overlap inside the same transaction.
            cur.execute("SELECT employee_id FROM employees WHERE employee_id=%s FOR UPDATE", (int(employee_id),))
            fetchone(cur)
            cur.execute(
                f"""
                SELECT leave_id FROM leave_requests
                WHERE employee_id=%s AND status IN ({_in_clause(active)})
                  AND start_date<=%s AND end_date>=%s
                LIMIT 1
                """,
                (int(employee_id), *active, end_date, start_date),
            )
            if fetchone(cur):
                raise DuplicateRecordError("overlapping leave request")

            cur.execute(
                """
                INSERT INTO leave_requests(
                    employee_id, leave_type, start_date, end_date, total_days, reason, status
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    leave_type.value,
                    start_date,
                    end_date,
                    int(total_days),
                    reason,
                    LeaveStatus.PENDING.value,
                ),
            )
            leave_id = int(cur.lastrowid)
            cur.execute(f"{_SELECT} WHERE l.leave_id=%s", (leave_id,))
            return _to_leave(fetchone(cur))

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        approved_date: datetime,
        approver_notes: Optional[str] = None,
    ) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE leave_requests
                SET status=%s, approved_date=%s, approver_notes=%s
                WHERE leave_id=%s AND status=%s
                """,
                (
                    status.value,
                    approved_date,
                    approver_notes,
                    int(leave_id),
                    LeaveStatus.PENDING.value,
                ),
            )
            return cur.rowcount > 0

    def delete_unapproved(self, leave_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM leave_requests WHERE leave_id=%s AND status<>%s",
                (int(leave_id), LeaveStatus.APPROVED.value),
            )
            return cur.rowcount > 0

    def summarize(
        self,
        *,
        employee_id: Optional[int] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> Mapping[LeaveStatus, tuple[int, int]]:
        clauses: list[str] = []
        params: list[object] = []
        if employee_id is not None:
            clauses.append("employee_id=%s")
            params.append(int(employee_id))
        if leave_type is not None:
            clauses.append("leave_type=%s")
            params.append(leave_type.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT status, COUNT(*) AS n, COALESCE(SUM(total_days), 0) AS days
                FROM leave_requests
                WHERE {build_where(clauses)}
                GROUP BY status
                """,
                tuple(params),
            )
            return {LeaveStatus(r["status"]): (int(r["n"]), int(r["days"])) for r in fetchall(cur)}
