from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import LeaveStatus, LeaveType


@dataclass(frozen=True)
class LeaveRequest:
    leave_id: int
    employee_id: int
    leave_type: LeaveType
    start_date: date
    end_date: date
    total_days: int
    reason: str
    status: LeaveStatus
    created_at: datetime
    approved_date: Optional[datetime] = None
    approver_notes: Optional[str] = None
    employee_name: Optional[str] = None
    department: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "id": self.leave_id,
            "employeeId": self.employee_id,
            "employeeName": self.employee_name,
            "department": self.department,
            "type": self.leave_type.value,
            "startDate": self.start_date.isoformat(),
            "endDate": self.end_date.isoformat(),
            "days": self.total_days,
            "reason": self.reason,
            "status": self.status.value,
            "appliedDate": self.created_at.isoformat(),
            "approvedDate": self.approved_date.isoformat() if self.approved_date else None,
            "approverNotes": self.approver_notes,
        }


@dataclass(frozen=True)
class LeaveQuery:
    status: Optional[LeaveStatus] = None
    leave_type: Optional[LeaveType] = None
    employee_id: Optional[int] = None
    limit: int = DEFAULT_LIST_LIMIT


@dataclass(frozen=True)
class LeaveStats:
    pending: int = 0
    approved: int = 0
    rejected: int = 0
    total_days: int = 0

    def to_dict(self) -> dict:
        return {
            "pending": self.pending,
            "approved": self.approved,
            "rejected": self.rejected,
            "totalDays": self.total_days,
        }
