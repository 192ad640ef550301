from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Optional

from ..common.datetime_utils import to_naive_local
from ..common.validators import require_enum
from ..core.enums import AttendanceStatus
from ..core.exceptions import (
    ConflictError,
    DuplicateRecordError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from ..employees.repository import EmployeeRepository
from .hours import HoursCalculator, StandardHoursCalculator
from .model import AttendanceQuery, AttendanceRecord, AttendanceStats
from .repository import AttendanceRepository

logger = logging.getLogger(__name__)

DUPLICATE_MESSAGE = "Attendance record already exists for this date"


class AttendanceService:
    def __init__(
        self,
        attendance: AttendanceRepository,
        employees: EmployeeRepository,
        *,
        calculator: Optional[HoursCalculator] = None,
    ):
        self._attendance = attendance
        self._employees = employees
        self._calculator = calculator or StandardHoursCalculator()

    def clock_event(
        self,
        *,
        employee_id: Optional[int],
        work_date: Optional[date],
        check_in: Optional[datetime] = None,
        check_out: Optional[datetime] = None,
        status=None,
        notes: Optional[str] = None,
    ) -> AttendanceRecord:
        """Create the single attendance record of an employee for one day."""
        if employee_id is None or work_date is None:
            raise ValidationError("Employee ID and date are required")
        status = require_enum(AttendanceStatus, status, "status") if status else AttendanceStatus.PRESENT

        if not self._employees.get_by_id(int(employee_id)):
            raise NotFoundError("Employee not found")

        if self._attendance.get_for_employee_and_date(int(employee_id), work_date):
            raise ConflictError(DUPLICATE_MESSAGE)

        check_in, check_out = _naive(check_in), _naive(check_out)
        hours = self._calculator.compute(check_in, check_out)
        try:
            return self._attendance.create(
                employee_id=int(employee_id),
                work_date=work_date,
                check_in=check_in,
                check_out=check_out,
                working_hours=hours.working_hours,
                overtime_hours=hours.overtime_hours,
                status=status,
                notes=(notes or "").strip() or None,
            )
        except DuplicateRecordError:
            raise ConflictError(DUPLICATE_MESSAGE)

    def update_times(
        self,
        attendance_id: int,
        *,
        check_in: Optional[datetime],
        check_out: Optional[datetime],
    ) -> AttendanceRecord:
        """Replace the clock times; the work date never changes."""
        record = self._attendance.get_by_id(int(attendance_id))
        if not record:
            raise NotFoundError("Attendance record not found")

        check_in, check_out = _naive(check_in), _naive(check_out)
        hours = self._calculator.compute(check_in, check_out)
        self._attendance.update_times(
            attendance_id=record.attendance_id,
            check_in=check_in,
            check_out=check_out,
            working_hours=hours.working_hours,
            overtime_hours=hours.overtime_hours,
        )
        return replace(
            record,
            check_in=check_in,
            check_out=check_out,
            working_hours=hours.working_hours,
            overtime_hours=hours.overtime_hours,
        )

    def query(self, filters: Optional[AttendanceQuery] = None) -> list[AttendanceRecord]:
        try:
            return list(self._attendance.query(filters or AttendanceQuery()))
        except StorageUnavailableError as e:
            logger.warning("Attendance query degraded to empty result: %s", e)
            return []

    def stats(self, filters: Optional[AttendanceQuery] = None) -> AttendanceStats:
        filters = replace(filters or AttendanceQuery(), limit=None)
        rows = self.query(filters)
        if not rows:
            return AttendanceStats()

        def count(status: AttendanceStatus) -> int:
            return sum(1 for r in rows if r.status == status)

        return AttendanceStats(
            present=count(AttendanceStatus.PRESENT),
            absent=count(AttendanceStatus.ABSENT),
            late=count(AttendanceStatus.LATE),
            half_day=count(AttendanceStatus.HALF_DAY),
            avg_working_hours=round(sum(r.working_hours for r in rows) / len(rows), 2),
            total_overtime_hours=round(sum(r.overtime_hours for r in rows), 2),
        )


def _naive(value: Optional[datetime]) -> Optional[datetime]:
    return to_naive_local(value) if value is not None else None
