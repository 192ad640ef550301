from __future__ import annotations

import logging
import secrets
from dataclasses import dataclass
from typing import Optional, Sequence

from werkzeug.security import generate_password_hash

from ..common.validators import require_non_empty
from ..core.enums import EmploymentStatus
from ..core.exceptions import (
    ConflictError,
    DependencyError,
    DuplicateRecordError,
    InvalidStateError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from ..notifications import messages
from ..notifications.mailer import MailSender
from ..users.service import PasswordService
from .cascade import HARD_DELETE_PLAN, CascadeStep, validate_plan
from .model import Employee, EmployeeQuery, EmployeeUpdate, NewEmployee
from .repository import EmployeeRepository

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class DeletionReport:
    employee_id: int
    deleted: dict[str, int]


class EmployeeService:
    """Employee lifecycle: hire, read, edit, deactivate (soft) and hard delete.

    States: ACTIVE -> INACTIVE via deactivate; ACTIVE or INACTIVE -> removed via
    hard_delete, which erases the employee and everything it owns.
    """

    def __init__(
        self,
        employees: EmployeeRepository,
        mailer: MailSender,
        *,
        login_url: str = "/",
        passwords: Optional[PasswordService] = None,
        delete_plan: Sequence[CascadeStep] = HARD_DELETE_PLAN,
    ):
        validate_plan(delete_plan)
        self._employees = employees
        self._mailer = mailer
        self._login_url = login_url
        self._passwords = passwords
        self._delete_plan = tuple(delete_plan)

    def create(self, new: NewEmployee, *, password: Optional[str] = None) -> Employee:
        new = NewEmployee(
            first_name=require_non_empty(new.first_name, "firstName"),
            last_name=require_non_empty(new.last_name, "lastName"),
            email=require_non_empty(new.email, "email").lower(),
            employee_code=require_non_empty(new.employee_code, "employeeNumber"),
            department=require_non_empty(new.department, "department"),
            designation=require_non_empty(new.designation, "position"),
            hired_date=new.hired_date,
            employment_status=new.employment_status,
            phone_number=(new.phone_number or "").strip() or None,
        )
        if new.hired_date is None:
            raise ValidationError("hireDate is required")

        if self._employees.find_by_email_or_code(email=new.email, employee_code=new.employee_code):
            raise ConflictError("Employee with this email or employee number already exists")

        # No password yet: the employee sets one through the password setup link.
        password_hash = generate_password_hash(password or secrets.token_urlsafe(24))
        try:
            employee = self._employees.create(new, password_hash=password_hash)
        except DuplicateRecordError:
            raise ConflictError("Employee with this email or employee number already exists")

        logger.info("Created employee %s (%s)", employee.employee_id, employee.employee_code)
        self._send_welcome(employee, with_setup_link=not password)
        return employee

    def resend_setup_link(self, employee_id: int) -> bool:
        """Issue a fresh password setup link; any earlier link stops working."""
        employee = self.get(employee_id)
        if self._passwords is None:
            raise InvalidStateError("Password setup links are not configured")
        return self._send_welcome(employee, with_setup_link=True)

    def _send_welcome(self, employee: Employee, *, with_setup_link: bool) -> bool:
        setup_url = None
        valid_hours = 0
        if with_setup_link and self._passwords is not None:
            token = self._passwords.issue_setup_token(employee.user_id)
            setup_url = self._passwords.setup_url(token)
            valid_hours = self._passwords.setup_hours
        return self._mailer.send_email(
            to=employee.email,
            **messages.welcome_employee(
                name=employee.full_name,
                login_url=self._login_url,
                setup_url=setup_url,
                valid_hours=valid_hours,
            ),
        )

    def get(self, employee_id: int) -> Employee:
        employee = self._employees.get_by_id(int(employee_id))
        if not employee:
            raise NotFoundError("Employee not found")
        return employee

    def update(self, employee_id: int, changes: EmployeeUpdate) -> Employee:
        current = self.get(employee_id)
        changes = _clean_update(changes)
        if changes.is_empty():
            return current

        if changes.email or changes.employee_code:
            clash = self._employees.find_by_email_or_code(
                email=changes.email,
                employee_code=changes.employee_code,
                exclude_id=current.employee_id,
            )
            if clash:
                raise ConflictError("Employee with this email or employee number already exists")

        try:
            updated = self._employees.update(current.employee_id, changes)
        except DuplicateRecordError:
            raise ConflictError("Employee with this email or employee number already exists")
        if not updated:
            raise NotFoundError("Employee not found")
        logger.info("Updated employee %s", current.employee_id)
        return updated

    def update_profile(
        self,
        employee_id: int,
        *,
        first_name: Optional[str] = None,
        last_name: Optional[str] = None,
        phone_number: Optional[str] = None,
    ) -> Employee:
        """Self-service edit: an employee may only change their name and phone."""
        return self.update(
            employee_id,
            EmployeeUpdate(first_name=first_name, last_name=last_name, phone_number=phone_number),
        )

    def list(self, query: Optional[EmployeeQuery] = None) -> list[Employee]:
        try:
            return list(self._employees.list(query or EmployeeQuery()))
        except StorageUnavailableError as e:
            logger.warning("Employee list degraded to empty result: %s", e)
            return []

    def deactivate(self, employee_id: int) -> Employee:
        employee = self.get(employee_id)
        self._employees.set_status(employee.employee_id, EmploymentStatus.INACTIVE)
        logger.info("Deactivated employee %s", employee.employee_id)
        return self.get(employee.employee_id)

    def hard_delete(self, employee_id: int) -> DeletionReport:
        """Erase the employee, its user credential and every record it owns.

        Blocked while the employee is the reviewer on any review. All deletes
        run in one transaction; an error in any step rolls all of them back.
        """
        deleted: dict[str, int] = {}
        with self._employees.transaction() as tx:
            employee = tx.lock_employee(int(employee_id))
            if not employee:
                raise NotFoundError("Employee not found")

            as_reviewer = tx.count_reviews_as_reviewer(employee.employee_id)
            if as_reviewer > 0:
                raise DependencyError(
                    f"Cannot delete employee: assigned as reviewer for {as_reviewer} review(s). "
                    "Reassign or complete these reviews first."
                )

            keys = {"employee_id": employee.employee_id, "user_id": employee.user_id}
            for step in self._delete_plan:
                deleted[step.table] = tx.delete_rows(step, keys[step.key])

        logger.info("Permanently deleted employee %s: %s", employee_id, deleted)
        return DeletionReport(employee_id=int(employee_id), deleted=deleted)


def _clean_update(changes: EmployeeUpdate) -> EmployeeUpdate:
    """Strip text fields; a field sent as blank is an error, except the phone number."""

    def text(value: Optional[str], field_name: str) -> Optional[str]:
        if value is None:
            return None
        if not str(value).strip():
            raise ValidationError(f"{field_name} cannot be empty")
        return str(value).strip()

    email = text(changes.email, "email")
    return EmployeeUpdate(
        first_name=text(changes.first_name, "firstName"),
        last_name=text(changes.last_name, "lastName"),
        email=email.lower() if email else None,
        employee_code=text(changes.employee_code, "employeeNumber"),
        department=text(changes.department, "department"),
        designation=text(changes.designation, "position"),
        hired_date=changes.hired_date,
        employment_status=changes.employment_status,
        phone_number=None if changes.phone_number is None else str(changes.phone_number).strip(),
    )
