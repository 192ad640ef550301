from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import Optional

from ..core.constants import DEFAULT_LIST_LIMIT
from ..core.enums import EmploymentStatus


@dataclass(frozen=True)
class Employee:
    """Domain entity: an employee record (owns one user credential)."""

    employee_id: int
    user_id: int
    employee_code: str
    first_name: str
    last_name: str
    email: str
    department: str
    designation: str
    employment_status: EmploymentStatus
    hired_date: date
    phone_number: Optional[str] = None
    created_at: Optional[datetime] = None

    @property
    def full_name(self) -> str:
        return f"{self.first_name} {self.last_name}".strip()

    def to_dict(self) -> dict:
        return {
            "id": self.employee_id,
            "userId": self.user_id,
            "employeeNumber": self.employee_code,
            "firstName": self.first_name,
            "lastName": self.last_name,
            "email": self.email,
            "department": self.department,
            "position": self.designation,
            "status": self.employment_status.value,
            "hireDate": self.hired_date.isoformat(),
            "phoneNumber": self.phone_number,
        }


@dataclass(frozen=True)
class NewEmployee:
    first_name: str
    last_name: str
    email: str
    employee_code: str
    department: str
    designation: str
    hired_date: date
    employment_status: EmploymentStatus = EmploymentStatus.ACTIVE
    phone_number: Optional[str] = None


@dataclass(frozen=True)
class EmployeeQuery:
    department: Optional[str] = None
    employment_status: Optional[EmploymentStatus] = None
    limit: int = DEFAULT_LIST_LIMIT


@dataclass(frozen=True)
class EmployeeUpdate:
    """Partial change of an employee; ``None`` leaves a field as it is.

    An empty ``phone_number`` clears the stored number.
    """

    first_name: Optional[str] = None
    last_name: Optional[str] = None
    email: Optional[str] = None
    employee_code: Optional[str] = None
    department: Optional[str] = None
    designation: Optional[str] = None
    hired_date: Optional[date] = None
    employment_status: Optional[EmploymentStatus] = None
    phone_number: Optional[str] = None

    def is_empty(self) -> bool:
        return all(getattr(self, f) is None for f in self.__dataclass_fields__)
