from __future__ import annotations

from dataclasses import dataclass
from typing import Mapping, Optional

from .attendance.mysql_attendance_repository import MySQLAttendanceRepository
from .attendance.service import AttendanceService
from .database.bootstrap import ping
from .database.connection import DBConfig, DatabaseConnection
from .employees.mysql_employee_repository import MySQLEmployeeRepository
from .employees.service import EmployeeService
from .leave.mysql_leave_repository import MySQLLeaveRepository
from .leave.service import LeaveService
from .notifications.mailer import MailSender
from .reviews.mysql_review_repository import MySQLReviewRepository
from .reviews.service import ReviewService
from .users.mysql_user_repository import MySQLUserRepository
from .users.service import AuthService, PasswordService


@dataclass(frozen=True)
class Container:
    conn: DatabaseConnection

    users_repo: MySQLUserRepository
    employees_repo: MySQLEmployeeRepository
    leave_repo: MySQLLeaveRepository
    attendance_repo: MySQLAttendanceRepository
    review_repo: MySQLReviewRepository

    auth_service: AuthService
    password_service: PasswordService
    employee_service: EmployeeService
    leave_service: LeaveService
    attendance_service: AttendanceService
    review_service: ReviewService

    def ping_database(self) -> None:
        ping(self.conn)


def build_container(
    *,
    db_config: Mapping,
    mailer: MailSender,
    app_base_url: str = "",
    hr_email: Optional[str] = None,
    leave_count_weekends: bool = True,
) -> Container:
    conn = DatabaseConnection(DBConfig.from_mapping(db_config))
    base_url = app_base_url.rstrip("/")

    users_repo = MySQLUserRepository(conn)
    employees_repo = MySQLEmployeeRepository(conn)
    leave_repo = MySQLLeaveRepository(conn)
    attendance_repo = MySQLAttendanceRepository(conn)
    review_repo = MySQLReviewRepository(conn)

    auth_service = AuthService(users_repo, employees_repo)
    password_service = PasswordService(users_repo, mailer, base_url=base_url)
    employee_service = EmployeeService(
        employees_repo,
        mailer,
        login_url=f"{base_url}/login",
        passwords=password_service,
    )
    leave_service = LeaveService(
        leave_repo,
        employees_repo,
        mailer,
        count_weekends=leave_count_weekends,
        hr_email=hr_email,
        review_url=f"{base_url}/employer/leave",
    )
    attendance_service = AttendanceService(attendance_repo, employees_repo)
    review_service = ReviewService(review_repo, employees_repo)

    return Container(
        conn=conn,
        users_repo=users_repo,
        employees_repo=employees_repo,
        leave_repo=leave_repo,
        attendance_repo=attendance_repo,
        review_repo=review_repo,
        auth_service=auth_service,
        password_service=password_service,
        employee_service=employee_service,
        leave_service=leave_service,
        attendance_service=attendance_service,
        review_service=review_service,
    )
