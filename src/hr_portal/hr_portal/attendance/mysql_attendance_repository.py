from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Sequence

from ..core.enums import AttendanceStatus
from ..database.connection import DatabaseConnection
from ..database.mysql_base import build_where, db_cursor, fetchall, fetchone
from .model import AttendanceQuery, AttendanceRecord
from .repository import AttendanceRepository

_SELECT = """
    SELECT a.attendance_id, a.employee_id, a.work_date, a.check_in, a.check_out,
           a.working_hours, a.overtime_hours, a.status, a.notes,
           e.first_name, e.last_name, e.department
    FROM attendance_records a
    JOIN employees e ON e.employee_id = a.employee_id
"""


def _to_record(r: dict) -> AttendanceRecord:
    return AttendanceRecord(
        attendance_id=int(r["attendance_id"]),
        employee_id=int(r["employee_id"]),
        work_date=r["work_date"],
        check_in=r.get("check_in"),
        check_out=r.get("check_out"),
        # DECIMAL columns come back as Decimal
        working_hours=float(r.get("working_hours") or 0),
        overtime_hours=float(r.get("overtime_hours") or 0),
        status=AttendanceStatus(r["status"]),
        notes=r.get("notes"),
        employee_name=f"{r.get('first_name') or ''} {r.get('last_name') or ''}".strip() or None,
        department=r.get("department"),
    )


class MySQLAttendanceRepository(AttendanceRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"{_SELECT} WHERE a.attendance_id=%s", (int(attendance_id),))
            r = fetchone(cur)
            return _to_record(r) if r else None

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"{_SELECT} WHERE a.employee_id=%s AND a.work_date=%s",
                (int(employee_id), work_date),
            )
            r = fetchone(cur)
            return _to_record(r) if r else None

    def create(
        self,
        *,
        employee_id: int,
        work_date: date,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        working_hours: float,
        overtime_hours: float,
        status: AttendanceStatus,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            # uq_attendance_employee_date turns a concurrent duplicate into DuplicateRecordError
            cur.execute(
                """
                INSERT INTO attendance_records(
                    employee_id, work_date, check_in, check_out,
                    working_hours, overtime_hours, status, notes
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(employee_id),
                    work_date,
                    check_in,
                    check_out,
                    working_hours,
                    overtime_hours,
                    status.value,
                    notes,
                ),
            )
            attendance_id = int(cur.lastrowid)
            cur.execute(f"{_SELECT} WHERE a.attendance_id=%s", (attendance_id,))
            return _to_record(fetchone(cur))

    def update_times(
        self,
        *,
        attendance_id: int,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        working_hours: float,
        overtime_hours: float,
    ) -> None:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                UPDATE attendance_records
                SET check_in=%s, check_out=%s, working_hours=%s, overtime_hours=%s
                WHERE attendance_id=%s
                """,
                (check_in, check_out, working_hours, overtime_hours, int(attendance_id)),
            )

    def query(self, query: AttendanceQuery) -> Sequence[AttendanceRecord]:
        clauses: list[str] = []
        params: list[object] = []

        if query.work_date is not None:
            clauses.append("a.work_date=%s")
            params.append(query.work_date)
        if query.employee_id is not None:
            clauses.append("a.employee_id=%s")
            params.append(int(query.employee_id))
        if query.department:
            clauses.append("e.department=%s")
            params.append(query.department)

        sql = f"{_SELECT} WHERE {build_where(clauses)} ORDER BY a.work_date DESC, a.attendance_id DESC"
        if query.limit is not None:
            sql += " LIMIT %s"
            params.append(int(query.limit))

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(sql, tuple(params))
            return [_to_record(r) for r in fetchall(cur)]
