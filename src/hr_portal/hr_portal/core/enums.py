from __future__ import annotations

from enum import Enum


class UserType(str, Enum):
    """Portal a user signs in to."""

    EMPLOYEE = "EMPLOYEE"
    EMPLOYER = "EMPLOYER"


class EmploymentStatus(str, Enum):
    ACTIVE = "ACTIVE"
    INACTIVE = "INACTIVE"
    TERMINATED = "TERMINATED"


class LeaveType(str, Enum):
    ANNUAL = "ANNUAL"
    SICK = "SICK"
    FAMILY = "FAMILY"
    MATERNITY = "MATERNITY"
    PATERNITY = "PATERNITY"
    STUDY = "STUDY"
    UNPAID = "UNPAID"


class LeaveStatus(str, Enum):
    """Approval flow of a leave request."""

    PENDING = "PENDING"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class AttendanceStatus(str, Enum):
    PRESENT = "PRESENT"
    ABSENT = "ABSENT"
    LATE = "LATE"
    HALF_DAY = "HALF_DAY"


class TokenPurpose(str, Enum):
    """What a one-time password link may be used for."""

    SETUP = "SETUP"
    RESET = "RESET"


class ReviewType(str, Enum):
    ANNUAL = "ANNUAL"
    MID_YEAR = "MID_YEAR"
    QUARTERLY = "QUARTERLY"
    PROBATION = "PROBATION"


class ReviewStatus(str, Enum):
    """Performance review flow; COMPLETED is final."""

    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    SUBMITTED = "SUBMITTED"
    COMPLETED = "COMPLETED"


class GoalStatus(str, Enum):
    NOT_STARTED = "NOT_STARTED"
    IN_PROGRESS = "IN_PROGRESS"
    COMPLETED = "COMPLETED"
