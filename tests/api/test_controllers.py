from __future__ import annotations

from datetime import date, datetime
from types import SimpleNamespace

import pytest
from flask import Flask

from src.hr_portal.hr_portal.attendance.controller import register as register_attendance
from src.hr_portal.hr_portal.attendance.model import AttendanceRecord, AttendanceStats
from src.hr_portal.hr_portal.core.enums import (
    AttendanceStatus,
    EmploymentStatus,
    LeaveStatus,
    LeaveType,
    ReviewStatus,
    ReviewType,
    UserType,
)
from src.hr_portal.hr_portal.core.exceptions import (
    AuthenticationError,
    ConflictError,
    DependencyError,
    InvalidStateError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from src.hr_portal.hr_portal.employees.controller import register as register_employees
from src.hr_portal.hr_portal.employees.model import Employee
from src.hr_portal.hr_portal.employees.service import DeletionReport
from src.hr_portal.hr_portal.leave.controller import register as register_leave
from src.hr_portal.hr_portal.leave.model import LeaveRequest
from src.hr_portal.hr_portal.reviews.controller import register as register_reviews
from src.hr_portal.hr_portal.reviews.model import Review
from src.hr_portal.hr_portal.users.model import User
from src.hr_portal.hr_portal.users.controller import register as register_users
from src.hr_portal.hr_portal.users.service import SessionUser


def _leave(leave_id=1, status=LeaveStatus.PENDING):
    return LeaveRequest(
        leave_id=leave_id,
        employee_id=7,
        leave_type=LeaveType.ANNUAL,
        start_date=date(2024, 1, 10),
        end_date=date(2024, 1, 12),
        total_days=3,
        reason="Trip",
        status=status,
        created_at=datetime(2024, 1, 1, 9, 0),
    )


class FakeLeaveService:
    def __init__(self):
        self.created = []
        self.listed = []
        self.error = None

    def create(self, **kwargs):
        if self.error:
            raise self.error
        self.created.append(kwargs)
        return _leave()

    def list(self, query=None):
        self.listed.append(query)
        return [_leave()]

    def update_status(self, leave_id, status, *, approver_notes=None):
        if self.error:
            raise self.error
        return _leave(leave_id, LeaveStatus(status))

    def delete(self, leave_id):
        if self.error:
            raise self.error

    def stats(self, *, employee_id=None, leave_type=None):
        raise RuntimeError("boom")


class FakeAttendanceService:
    def __init__(self):
        self.clocked = []
        self.queries = []

    def clock_event(self, **kwargs):
        self.clocked.append(kwargs)
        return AttendanceRecord(
            attendance_id=1,
            employee_id=kwargs["employee_id"],
            work_date=kwargs["work_date"],
            check_in=kwargs["check_in"],
            check_out=kwargs["check_out"],
            working_hours=9.5,
            overtime_hours=1.5,
            status=AttendanceStatus.PRESENT,
        )

    def query(self, filters=None):
        self.queries.append(filters)
        return []

    def update_times(self, attendance_id, *, check_in, check_out):
        raise NotFoundError("Attendance record not found")

    def stats(self, filters=None):
        return AttendanceStats(present=2)


def _employee(employee_id=7, **overrides):
    fields = dict(
        employee_id=employee_id,
        user_id=107,
        employee_code="E007",
        first_name="Ann",
        last_name="Lee",
        email="ann@example.com",
        department="Finance",
        designation="Analyst",
        employment_status=EmploymentStatus.ACTIVE,
        hired_date=date(2020, 1, 1),
    )
    fields.update(overrides)
    return Employee(**fields)


class FakeEmployeeService:
    def __init__(self):
        self.deactivated = []
        self.reviewer = False
        self.updates = []
        self.profile_updates = []

    def get(self, employee_id):
        return _employee(employee_id)

    def update(self, employee_id, changes):
        self.updates.append((employee_id, changes))
        if changes.email == "taken@example.com":
            raise ConflictError("Employee with this email or employee number already exists")
        return _employee(employee_id, designation=changes.designation or "Analyst")

    def update_profile(self, employee_id, **kwargs):
        self.profile_updates.append((employee_id, kwargs))
        return _employee(employee_id, first_name=kwargs.get("first_name") or "Ann")

    def resend_setup_link(self, employee_id):
        return False

    def hard_delete(self, employee_id):
        if self.reviewer:
            raise DependencyError("Cannot delete employee: assigned as reviewer for 2 review(s).")
        return DeletionReport(employee_id=employee_id, deleted={"employees": 1, "users": 1})

    def deactivate(self, employee_id):
        self.deactivated.append(employee_id)
        raise NotFoundError("Employee not found")

    def list(self, query=None):
        return []


def _review(review_id=3, status=ReviewStatus.IN_PROGRESS):
    return Review(
        review_id=review_id,
        employee_id=7,
        reviewer_id=8,
        review_type=ReviewType.ANNUAL,
        status=status,
        due_date=date(2024, 6, 30),
    )


class FakeReviewService:
    def __init__(self):
        self.created = []
        self.queries = []

    def create(self, **kwargs):
        self.created.append(kwargs)
        return _review()

    def list(self, query=None):
        self.queries.append(query)
        return [_review()]

    def get(self, review_id):
        raise NotFoundError("Review not found")

    def update(self, review_id, **kwargs):
        raise InvalidStateError("Completed reviews cannot be changed")

    def add_note(self, review_id, content, note_type=None):
        raise ValidationError("Notes content is required")

    def delete_goal(self, goal_id):
        pass


class FakePasswordService:
    def __init__(self):
        self.reset_requests = []

    def check_setup_token(self, token):
        if token != "good":
            raise ValidationError("Invalid or expired setup token")
        return User(3, "ann@example.com", "x", UserType.EMPLOYEE)

    def setup_password(self, token, password):
        return self.check_setup_token(token)

    def request_reset(self, email, user_type):
        self.reset_requests.append((email, user_type))

    def reset_password(self, token, password):
        raise ValidationError("Invalid or expired reset token")


class FakeAuthService:
    def authenticate(self, email, password):
        if password != "pw":
            raise AuthenticationError("Invalid email or password")
        return SessionUser(user_id=3, email=email, user_type=UserType.EMPLOYEE, employee_id=7)


@pytest.fixture()
def container():
    return SimpleNamespace(
        auth_service=FakeAuthService(),
        leave_service=FakeLeaveService(),
        attendance_service=FakeAttendanceService(),
        employee_service=FakeEmployeeService(),
        review_service=FakeReviewService(),
        password_service=FakePasswordService(),
        db_up=True,
    )


@pytest.fixture()
def app(container):
    def ping_database():
        if not container.db_up:
            raise StorageUnavailableError("Can't connect to MySQL server")

    container.ping_database = ping_database

    app = Flask(__name__)
    app.secret_key = "test"
    app.config["TESTING"] = True
    register_users(app, container)
    register_employees(app, container)
    register_leave(app, container)
    register_attendance(app, container)
    register_reviews(app, container)
    return app


def _login_as(client, user_type: UserType, employee_id=None):
    with client.session_transaction() as sess:
        sess["user_id"] = 1
        sess["user_type"] = user_type.value
        if employee_id is not None:
            sess["employee_id"] = employee_id


@pytest.fixture()
def employer(app):
    client = app.test_client()
    _login_as(client, UserType.EMPLOYER)
    return client


@pytest.fixture()
def employee(app):
    client = app.test_client()
    _login_as(client, UserType.EMPLOYEE, employee_id=7)
    return client


def test_anonymous_gets_401(app):
    resp = app.test_client().get("/api/leave")
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Unauthorized"}


def test_employee_cannot_use_employer_routes(employee):
    assert employee.get("/api/attendance").status_code == 403


def test_login_sets_session(app):
    client = app.test_client()
    resp = client.post("/api/auth/login", json={"email": "ann@example.com", "password": "pw"})

    assert resp.status_code == 200
    assert resp.get_json()["employeeId"] == 7
    with client.session_transaction() as sess:
        assert sess["user_type"] == "EMPLOYEE"
        assert sess["employee_id"] == 7


def test_login_bad_password(app):
    resp = app.test_client().post("/api/auth/login", json={"email": "ann@example.com", "password": "nope"})
    assert resp.status_code == 401
    assert resp.get_json() == {"error": "Invalid email or password"}


def test_logout_clears_session(employee):
    employee.post("/api/auth/logout")
    assert employee.get("/api/auth/me").status_code == 401


def test_create_leave_parses_dates(employer, container):
    resp = employer.post(
        "/api/leave",
        json={"employeeId": "7", "type": "ANNUAL", "startDate": "2024-01-10", "endDate": "2024-01-12", "reason": "x"},
    )

    assert resp.status_code == 201
    assert resp.get_json()["days"] == 3
    created = container.leave_service.created[0]
    assert created["employee_id"] == 7
    assert created["start_date"] == date(2024, 1, 10)


def test_create_leave_overlap_is_409(employer, container):
    container.leave_service.error = ConflictError("You already have a leave request for overlapping dates")
    resp = employer.post(
        "/api/leave",
        json={"employeeId": 7, "type": "ANNUAL", "startDate": "2024-01-12", "endDate": "2024-01-14", "reason": "x"},
    )
    assert resp.status_code == 409


def test_bad_date_is_400(employer):
    resp = employer.post(
        "/api/leave",
        json={"employeeId": 7, "type": "ANNUAL", "startDate": "12/01/2024", "endDate": "2024-01-14", "reason": "x"},
    )
    assert resp.status_code == 400


def test_delete_approved_leave_is_400(employer, container):
    container.leave_service.error = InvalidStateError("Cannot delete approved leave requests")
    resp = employer.delete("/api/leave/1")
    assert resp.status_code == 400
    assert resp.get_json()["error"] == "Cannot delete approved leave requests"


def test_list_leave_filters(employer, container):
    resp = employer.get("/api/leave?status=pending&type=all&employeeId=7")

    assert resp.status_code == 200
    query = container.leave_service.listed[-1]
    assert query.status == LeaveStatus.PENDING
    assert query.leave_type is None
    assert query.employee_id == 7


def test_unexpected_error_is_500(employer):
    resp = employer.get("/api/leave/stats")
    assert resp.status_code == 500
    assert resp.get_json() == {"error": "Internal server error"}


def test_employee_leave_uses_session_employee(employee, container):
    resp = employee.post(
        "/api/employee/leave",
        json={"employeeId": 99, "type": "SICK", "startDate": "2024-01-10", "endDate": "2024-01-11", "reason": "flu"},
    )
    assert resp.status_code == 201
    assert container.leave_service.created[0]["employee_id"] == 7


def test_clock_event(employer, container):
    resp = employer.post(
        "/api/attendance",
        json={
            "employeeId": 7,
            "date": "2024-01-10",
            "clockIn": "2024-01-10T08:00:00",
            "clockOut": "2024-01-10T17:30:00",
        },
    )

    assert resp.status_code == 201
    body = resp.get_json()
    assert body["totalHours"] == 9.5
    assert body["overtimeHours"] == 1.5
    assert container.attendance_service.clocked[0]["check_in"] == datetime(2024, 1, 10, 8, 0)


def test_clock_event_requires_date(employer):
    assert employer.post("/api/attendance", json={"employeeId": 7}).status_code == 400


def test_update_missing_attendance_is_404(employer):
    resp = employer.put("/api/attendance/5", json={"clockIn": "2024-01-10T08:00:00"})
    assert resp.status_code == 404


def test_attendance_query_args(employer, container):
    employer.get("/api/attendance?date=2024-01-10&department=Finance")

    query = container.attendance_service.queries[-1]
    assert query.work_date == date(2024, 1, 10)
    assert query.department == "Finance"


def test_employee_attendance_is_scoped(employee, container):
    employee.get("/api/employee/attendance")
    assert container.attendance_service.queries[-1].employee_id == 7


def test_hard_delete_blocked_by_reviews_is_409(employer, container):
    container.employee_service.reviewer = True
    resp = employer.delete("/api/employees/7")
    assert resp.status_code == 409


def test_hard_delete_reports_counts(employer):
    resp = employer.delete("/api/employees/7")
    assert resp.status_code == 200
    assert resp.get_json()["deleted"] == {"employees": 1, "users": 1}


def test_deactivate_action(employer, container):
    resp = employer.delete("/api/employees/7?action=deactivate")
    assert resp.status_code == 404
    assert container.employee_service.deactivated == [7]


def test_create_employee_missing_field(employer):
    resp = employer.post("/api/employees", json={"firstName": "Ann"})
    assert resp.status_code == 400
    assert resp.get_json() == {"error": "lastName is required"}


def test_health(app, container):
    client = app.test_client()
    assert client.get("/api/health").get_json() == {"status": "ok", "database": "ok"}

    container.db_up = False
    resp = client.get("/api/health")
    assert resp.status_code == 503
    assert resp.get_json()["database"] == "unavailable"


def test_update_employee(employer, container):
    resp = employer.put("/api/employees/7", json={"position": "Lead", "hireDate": "2021-02-03", "status": "inactive"})

    assert resp.status_code == 200
    assert resp.get_json()["position"] == "Lead"
    _, changes = container.employee_service.updates[-1]
    assert changes.hired_date == date(2021, 2, 3)
    assert changes.employment_status == EmploymentStatus.INACTIVE
    assert changes.first_name is None


def test_update_employee_duplicate_email_is_409(employer):
    assert employer.put("/api/employees/7", json={"email": "taken@example.com"}).status_code == 409


def test_update_employee_requires_employer(employee):
    assert employee.put("/api/employees/7", json={"position": "Lead"}).status_code == 403


def test_resend_setup_mail_failure(employer):
    resp = employer.post("/api/employees/7/password-setup")
    assert resp.status_code == 502


def test_profile_is_session_scoped(employee, container):
    assert employee.get("/api/employee/profile").get_json()["id"] == 7

    resp = employee.put("/api/employee/profile", json={"firstName": "Anna", "email": "x@example.com", "phoneNumber": "1"})

    assert resp.status_code == 200
    employee_id, kwargs = container.employee_service.profile_updates[-1]
    assert employee_id == 7
    assert kwargs == {"first_name": "Anna", "last_name": None, "phone_number": "1"}


def test_profile_needs_employee_session(employer):
    assert employer.get("/api/employee/profile").status_code == 403


def test_setup_password_token_check(app):
    client = app.test_client()
    assert client.get("/api/auth/setup-password?token=good").get_json() == {
        "valid": True,
        "email": "ann@example.com",
        "userType": "EMPLOYEE",
    }
    assert client.get("/api/auth/setup-password?token=bad").status_code == 400


def test_setup_password(app):
    resp = app.test_client().post("/api/auth/setup-password", json={"token": "good", "password": "longenough"})
    assert resp.status_code == 200
    assert resp.get_json()["userType"] == "EMPLOYEE"


def test_forgot_password_always_answers_the_same(app, container):
    resp = app.test_client().post("/api/auth/forgot-password", json={"email": "x@example.com", "userType": "EMPLOYEE"})

    assert resp.status_code == 200
    assert resp.get_json() == {"message": "If an account exists, a password reset email has been sent."}
    assert container.password_service.reset_requests == [("x@example.com", "EMPLOYEE")]


def test_reset_password_bad_token_is_400(app):
    resp = app.test_client().post("/api/auth/reset-password", json={"token": "nope", "password": "longenough"})
    assert resp.status_code == 400


def test_create_review(employer, container):
    resp = employer.post("/api/reviews", json={"employeeId": "7", "reviewerId": 8, "dueDate": "2024-06-30"})

    assert resp.status_code == 201
    assert resp.get_json()["status"] == "IN_PROGRESS"
    created = container.review_service.created[0]
    assert created["employee_id"] == 7
    assert created["due_date"] == date(2024, 6, 30)


def test_review_errors_map_to_status(employer):
    assert employer.get("/api/reviews/3").status_code == 404
    assert employer.put("/api/reviews/3", json={"summary": "x"}).status_code == 400
    assert employer.post("/api/reviews/3/notes", json={"notes": " "}).status_code == 400


def test_review_list_filter(employer, container):
    employer.get("/api/reviews?employeeId=7")
    assert container.review_service.queries[-1].employee_id == 7


def test_employee_sees_own_reviews(employee, container):
    assert employee.get("/api/employee/reviews").status_code == 200
    assert container.review_service.queries[-1].employee_id == 7


def test_delete_goal(employer):
    assert employer.delete("/api/goals/4").get_json() == {"message": "Goal deleted successfully"}
