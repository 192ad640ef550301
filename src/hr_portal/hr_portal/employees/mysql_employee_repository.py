from __future__ import annotations

from contextlib import contextmanager
from typing import Iterator, Optional, Sequence

from ..core.enums import EmploymentStatus, UserType
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .cascade import CascadeStep
from .model import Employee, EmployeeQuery, EmployeeUpdate, NewEmployee
from .repository import EmployeeDeletion, EmployeeRepository

_SELECT = """
    SELECT e.employee_id, e.user_id, e.employee_code, e.first_name, e.last_name,
           u.email, e.department, e.designation, e.employment_status,
           e.hired_date, e.phone_number, e.created_at
    FROM employees e
    JOIN users u ON u.user_id = e.user_id
"""

_DELETE_SQL = {
    "goals": """
        DELETE g FROM goals g
        JOIN reviews r ON r.review_id = g.review_id
        WHERE r.employee_id=%s
    """,
    "reviews": "DELETE FROM reviews WHERE employee_id=%s",
    "user_badges": "DELETE FROM user_badges WHERE employee_id=%s",
    "enrollments": "DELETE FROM enrollments WHERE employee_id=%s",
    "documents": "DELETE FROM documents WHERE employee_id=%s",
    "leave_requests": "DELETE FROM leave_requests WHERE employee_id=%s",
    "attendance_records": "DELETE FROM attendance_records WHERE employee_id=%s",
    "employees": "DELETE FROM employees WHERE employee_id=%s",
    "users": "DELETE FROM users WHERE user_id=%s",
}


def _to_employee(r: dict) -> Employee:
    return Employee(
        employee_id=int(r["employee_id"]),
        user_id=int(r["user_id"]),
        employee_code=r["employee_code"],
        first_name=r["first_name"],
        last_name=r["last_name"],
        email=r["email"],
        department=r["department"],
        designation=r["designation"],
        employment_status=EmploymentStatus(r["employment_status"]),
        hired_date=r["hired_date"],
        phone_number=r.get("phone_number"),
        created_at=r.get("created_at"),
    )


def _employee_columns(changes: EmployeeUpdate) -> list[tuple[str, object]]:
    """Column assignments for the employees table; email lives on users."""
    columns = [
        ("first_name", changes.first_name),
        ("last_name", changes.last_name),
        ("employee_code", changes.employee_code),
        ("department", changes.department),
        ("designation", changes.designation),
        ("hired_date", changes.hired_date),
        ("employment_status", changes.employment_status.value if changes.employment_status else None),
    ]
    out = [(c, v) for c, v in columns if v is not None]
    if changes.phone_number is not None:
        out.append(("phone_number", changes.phone_number or None))
    return out


class _MySQLEmployeeDeletion(EmployeeDeletion):
    def __init__(self, cur):
        self._cur = cur

    def lock_employee(self, employee_id: int) -> Optional[Employee]:
        self._cur.execute(f"{_SELECT} WHERE e.employee_id=%s FOR UPDATE", (int(employee_id),))
        r = fetchone(self._cur)
        return _to_employee(r) if r else None

    def count_reviews_as_reviewer(self, employee_id: int) -> int:
        self._cur.execute("SELECT COUNT(*) AS n FROM reviews WHERE reviewer_id=%s", (int(employee_id),))
        r = fetchone(self._cur)
        return int(r["n"]) if r else 0

    def delete_rows(self, step: CascadeStep, key_value: int) -> int:
        sql = _DELETE_SQL.get(step.table)
        if sql is None:
            raise ValueError(f"No delete statement for table {step.table!r}")
        self._cur.execute(sql, (int(key_value),))
        return int(self._cur.rowcount)


class MySQLEmployeeRepository(EmployeeRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE e.employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE e.user_id=%s", (int(user_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def find_by_email_or_code(
        self,
        *,
        email: Optional[str],
        employee_code: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> Optional[Employee]:
        matches: list[str] = []
        params: list[object] = []
        if email:
            matches.append("u.email=%s")
            params.append(email)
        if employee_code:
            matches.append("e.employee_code=%s")
            params.append(employee_code)
        if not matches:
            return None

        clauses = [f"({' OR '.join(matches)})"]
        if exclude_id is not None:
            clauses.append("e.employee_id<>%s")
            params.append(int(exclude_id))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE {build_where(clauses)} LIMIT 1", tuple(params))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    def list(self, query: EmployeeQuery) -> Sequence[Employee]:
        clauses: list[str] = []
        params: list[object] = []

        if query.department:
            clauses.append("e.department=%s")
            params.append(query.department)
        if query.employment_status is not None:
            clauses.append("e.employment_status=%s")
            params.append(query.employment_status.value)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE {build_where(clauses)} ORDER BY e.created_at DESC LIMIT %s",
                tuple(params + [int(query.limit)]),
            )
            return [_to_employee(r) for r in fetchall(cur)]

    def create(self, new: NewEmployee, *, password_hash: str) -> Employee:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                INSERT INTO users(email, password_hash, user_type, is_active)
                VALUES(%s,%s,%s,1)
                """,
                (new.email, password_hash, UserType.EMPLOYEE.value),
            )
            user_id = int(cur.lastrowid)
            cur.execute(
                """
                INSERT INTO employees(
                    user_id, employee_code, first_name, last_name, department,
                    designation, employment_status, hired_date, phone_number
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    user_id,
                    new.employee_code,
                    new.first_name,
                    new.last_name,
                    new.department,
                    new.designation,
                    new.employment_status.value,
                    new.hired_date,
                    new.phone_number,
                ),
            )
            employee_id = int(cur.lastrowid)
            cur.execute(f"{_SELECT} WHERE e.employee_id=%s", (employee_id,))
            return _to_employee(fetchone(cur))

    def set_status(self, employee_id: int, status: EmploymentStatus) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE employees SET employment_status=%s WHERE employee_id=%s",
                (status.value, int(employee_id)),
            )

    def update(self, employee_id: int, changes: EmployeeUpdate) -> Optional[Employee]:
        assignments: list[str] = []
        params: list[object] = []
        for column, value in _employee_columns(changes):
            assignments.append(f"{column}=%s")
            params.append(value)

        with db_cursor(self._conn_factory) as (_, cur):
            if assignments:
                cur.execute(
                    f"UPDATE employees SET {', '.join(assignments)} WHERE employee_id=%s",
                    tuple(params + [int(employee_id)]),
                )
            if changes.email is not None:
                cur.execute(
                    """
                    UPDATE users u
                    JOIN employees e ON e.user_id = u.user_id
                    SET u.email=%s
                    WHERE e.employee_id=%s
                    """,
                    (changes.email, int(employee_id)),
                )
            cur.execute(f"{_SELECT} WHERE e.employee_id=%s", (int(employee_id),))
            r = fetchone(cur)
            return _to_employee(r) if r else None

    @contextmanager
    def transaction(self) -> Iterator[EmployeeDeletion]:
        with db_cursor(self._conn_factory) as (_, cur):
            yield _MySQLEmployeeDeletion(cur)
