from __future__ import annotations

import logging
from datetime import date
from typing import Optional

from ..common.date_ranges import DateRange, inclusive_days, overlaps, working_days
from ..common.datetime_utils import now_local
from ..common.validators import require_enum, require_non_empty
from ..core.constants import ACTIVE_LEAVE_STATUSES
from ..core.enums import LeaveStatus, LeaveType
from ..core.exceptions import (
    ConflictError,
    DuplicateRecordError,
    InvalidStateError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from ..employees.repository import EmployeeRepository
from ..notifications import messages
from ..notifications.mailer import MailSender
from .model import LeaveQuery, LeaveRequest, LeaveStats
from .repository import LeaveRepository

logger = logging.getLogger(__name__)

OVERLAP_MESSAGE = "You already have a leave request for overlapping dates"


class LeaveService:
    def __init__(
        self,
        leaves: LeaveRepository,
        employees: EmployeeRepository,
        mailer: MailSender,
        *,
        count_weekends: bool = True,
        hr_email: Optional[str] = None,
        review_url: str = "/",
    ):
        self._leaves = leaves
        self._employees = employees
        self._mailer = mailer
        self._count_weekends = bool(count_weekends)
        self._hr_email = hr_email
        self._review_url = review_url

    def _total_days(self, start_date: date, end_date: date) -> int:
        if self._count_weekends:
            return inclusive_days(start_date, end_date)
        return working_days(start_date, end_date)

    def create(
        self,
        *,
        employee_id: Optional[int],
        leave_type,
        start_date: Optional[date],
        end_date: Optional[date],
        reason: Optional[str],
    ) -> LeaveRequest:
        if employee_id is None:
            raise ValidationError("employeeId is required")
        if leave_type is None or leave_type == "":
            raise ValidationError("leaveType is required")
        if start_date is None:
            raise ValidationError("startDate is required")
        if end_date is None:
            raise ValidationError("endDate is required")
        reason = require_non_empty(reason or "", "reason")
        leave_type = require_enum(LeaveType, leave_type, "leaveType")

        if start_date >= end_date:
            raise ValidationError("End date must be after start date")

        total_days = self._total_days(start_date, end_date)

        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")

        existing = self._leaves.list_for_employee(employee.employee_id, statuses=ACTIVE_LEAVE_STATUSES)
        ranges = [DateRange(r.start_date, r.end_date, r.status) for r in existing]
        if overlaps(start_date, end_date, ranges, ACTIVE_LEAVE_STATUSES):
            raise ConflictError(OVERLAP_MESSAGE)

        try:
            leave = self._leaves.create(
                employee_id=employee.employee_id,
                leave_type=leave_type,
                start_date=start_date,
                end_date=end_date,
                total_days=total_days,
                reason=reason,
            )
        except DuplicateRecordError:
            # A concurrent request for the same days won the race.
            raise ConflictError(OVERLAP_MESSAGE)

        if self._hr_email:
            self._mailer.send_email(
                to=self._hr_email,
                **messages.leave_submitted(
                    employee_name=employee.full_name,
                    leave_type=leave_type.value,
                    start=start_date,
                    end=end_date,
                    review_url=self._review_url,
                ),
            )
        return leave

    def get(self, leave_id: int) -> LeaveRequest:
        leave = self._leaves.get_by_id(int(leave_id))
        if not leave:
            raise NotFoundError("Leave request not found")
        return leave

    def update_status(self, leave_id: int, new_status, *, approver_notes: Optional[str] = None) -> LeaveRequest:
        new_status = require_enum(LeaveStatus, new_status, "status")
        if new_status not in (LeaveStatus.APPROVED, LeaveStatus.REJECTED):
            raise ValidationError("status must be APPROVED or REJECTED")

        leave = self.get(leave_id)
        if leave.status != LeaveStatus.PENDING:
            raise InvalidStateError("Can only update status of pending leave requests")

        notes = (approver_notes or "").strip() or None
        decided = self._leaves.decide(
            leave_id=leave.leave_id,
            status=new_status,
            approved_date=now_local(),
            approver_notes=notes,
        )
        if not decided:
            raise InvalidStateError("Leave request was already decided")

        leave = self.get(leave.leave_id)
        employee = self._employees.get_by_id(leave.employee_id)
        if employee:
            self._mailer.send_email(
                to=employee.email,
                **messages.leave_decided(
                    name=employee.full_name,
                    status=new_status.value,
                    start=leave.start_date,
                    end=leave.end_date,
                    notes=notes,
                ),
            )
        return leave

    def delete(self, leave_id: int) -> None:
        leave = self.get(leave_id)
        if leave.status == LeaveStatus.APPROVED:
            raise InvalidStateError("Cannot delete approved leave requests")
        if not self._leaves.delete_unapproved(leave.leave_id):
            raise InvalidStateError("Leave request was approved or removed meanwhile")

    def list(self, query: Optional[LeaveQuery] = None) -> list[LeaveRequest]:
        try:
            return list(self._leaves.list(query or LeaveQuery()))
        except StorageUnavailableError as e:
            logger.warning("Leave list degraded to empty result: %s", e)
            return []

    def stats(self, *, employee_id: Optional[int] = None, leave_type: Optional[LeaveType] = None) -> LeaveStats:
        try:
            summary = self._leaves.summarize(employee_id=employee_id, leave_type=leave_type)
        except StorageUnavailableError as e:
            logger.warning("Leave stats degraded to zeros: %s", e)
            return LeaveStats()

        def count(status: LeaveStatus) -> int:
            return summary.get(status, (0, 0))[0]

        return LeaveStats(
            pending=count(LeaveStatus.PENDING),
            approved=count(LeaveStatus.APPROVED),
            rejected=count(LeaveStatus.REJECTED),
            total_days=summary.get(LeaveStatus.APPROVED, (0, 0))[1],
        )
