from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import AttendanceStatus


@dataclass(frozen=True)
class AttendanceRecord:
    """Domain entity: one employee's attendance for one day."""

    attendance_id: int
    employee_id: int
    work_date: date
    check_in: Optional[datetime]
    check_out: Optional[datetime]
    working_hours: float
    overtime_hours: float
    status: AttendanceStatus
    notes: Optional[str] = None
    employee_name: Optional[str] = None
    department: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.attendance_id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "department": self.department,
            "date": self.work_date.isoformat(),
            "clockIn": self.check_in.isoformat() if self.check_in else None,
            "clockOut": self.check_out.isoformat() if self.check_out else None,
            "totalHours": self.working_hours,
            "overtimeHours": self.overtime_hours,
            "status": self.status.value,
            "notes": self.notes,
        }


@dataclass(frozen=True)
class AttendanceQuery:
    work_date: Optional[date] = None
    employee_id: Optional[int] = None
    department: Optional[str] = None
    limit: Optional[int] = DEFAULT_LIST_LIMIT


@dataclass(frozen=True)
class AttendanceStats:
    present: int = 0
    absent: int = 0
    late: int = 0
    half_day: int = 0
    avg_working_hours: float = 0.0
    total_overtime_hours: float = 0.0

    def to_dict(self) -> dict:
        return {
            "presentToday": self.present,
            "absentToday": self.absent,
            "lateToday": self.late,
            "halfDayToday": self.half_day,
            "avgWorkingHours": self.avg_working_hours,
            "totalOvertimeHours": self.total_overtime_hours,
        }
