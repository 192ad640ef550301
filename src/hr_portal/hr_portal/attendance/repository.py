from __future__ import annotations

from datetime import date, datetime
from typing import Optional, Protocol, Sequence

from ..core.enums import AttendanceStatus
from .model import AttendanceQuery, AttendanceRecord


class AttendanceRepository(Protocol):
    def get_by_id(self, attendance_id: int) -> Optional[AttendanceRecord]:
        raise NotImplementedError

    def get_for_employee_and_date(self, employee_id: int, work_date: date) -> Optional[AttendanceRecord]:
        raise NotImplementedError

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
        """Raises DuplicateRecordError when (employee_id, work_date) already exists."""

        raise NotImplementedError

    def update_times(
        self,
        *,
        attendance_id: int,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
        working_hours: float,
        overtime_hours: float,
    ) -> None:
        raise NotImplementedError

    def query(self, query: AttendanceQuery) -> Sequence[AttendanceRecord]:
        """Ordered by work date, newest first."""

        raise NotImplementedError
