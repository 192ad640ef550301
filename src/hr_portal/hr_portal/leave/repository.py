from __future__ import annotations

from datetime import date, datetime
from typing import Collection, Mapping, Optional, Protocol, Sequence

from ..core.enums import LeaveStatus, LeaveType
from .model import LeaveQuery, LeaveRequest


class LeaveRepository(Protocol):
    def get_by_id(self, leave_id: int) -> Optional[LeaveRequest]:
        raise NotImplementedError

    def list(self, query: LeaveQuery) -> Sequence[LeaveRequest]:
        """Newest first."""

        raise NotImplementedError

    def list_for_employee(self, employee_id: int, *, statuses: Collection[LeaveStatus]) -> Sequence[LeaveRequest]:
        raise NotImplementedError

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
        """Insert a PENDING request.

        Raises DuplicateRecordError if an active request of the same employee
        overlaps the range at write time.
        """

        raise NotImplementedError

    def decide(
        self,
        *,
        leave_id: int,
        status: LeaveStatus,
        approved_date: datetime,
        approver_notes: Optional[str] = None,
    ) -> bool:
        """Move a PENDING request to ``status``; False if it was no longer pending."""

        raise NotImplementedError

    def delete_unapproved(self, leave_id: int) -> bool:
        raise NotImplementedError

    def summarize(
        self,
        *,
        employee_id: Optional[int] = None,
        leave_type: Optional[LeaveType] = None,
    ) -> Mapping[LeaveStatus, tuple[int, int]]:
        """(request count, sum of total_days) per status."""

        raise NotImplementedError
