from __future__ import annotations

from typing import ContextManager, Optional, Protocol, Sequence

from ..core.enums import EmploymentStatus
from .cascade import CascadeStep
from .model import Employee, EmployeeQuery, EmployeeUpdate, NewEmployee


class EmployeeDeletion(Protocol):
    """Statements that run inside the hard-delete transaction."""

    def lock_employee(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def count_reviews_as_reviewer(self, employee_id: int) -> int:
        raise NotImplementedError

    def delete_rows(self, step: CascadeStep, key_value: int) -> int:
        """Delete the rows of ``step.table`` selected by ``step.key``; return the count."""

        raise NotImplementedError


class EmployeeRepository(Protocol):
    def get_by_id(self, employee_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def get_by_user_id(self, user_id: int) -> Optional[Employee]:
        raise NotImplementedError

    def find_by_email_or_code(
        self,
        *,
        email: Optional[str],
        employee_code: Optional[str],
        exclude_id: Optional[int] = None,
    ) -> Optional[Employee]:
        """Any other employee already using the email or the employee code."""

        raise NotImplementedError

    def list(self, query: EmployeeQuery) -> Sequence[Employee]:
        raise NotImplementedError

    def create(self, new: NewEmployee, *, password_hash: str) -> Employee:
        """Insert the user credential and the employee row in one transaction."""

        raise NotImplementedError

    def set_status(self, employee_id: int, status: EmploymentStatus) -> None:
        raise NotImplementedError

    def update(self, employee_id: int, changes: EmployeeUpdate) -> Optional[Employee]:
        """Apply the non-None fields (email goes to the user row); None if the employee is gone."""

        raise NotImplementedError

    def transaction(self) -> ContextManager[EmployeeDeletion]:
        """Commit when the block exits normally, roll back every statement otherwise."""

        raise NotImplementedError
