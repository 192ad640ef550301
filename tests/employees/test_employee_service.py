from __future__ import annotations

import copy
from contextlib import contextmanager
from dataclasses import replace
from datetime import date

import pytest
from werkzeug.security import check_password_hash

from src.hr_portal.hr_portal.core.enums import EmploymentStatus
from src.hr_portal.hr_portal.core.exceptions import (
    ConflictError,
    DependencyError,
    InvalidStateError,
    NotFoundError,
    StorageUnavailableError,
    ValidationError,
)
from src.hr_portal.hr_portal.employees.cascade import HARD_DELETE_PLAN
from src.hr_portal.hr_portal.employees.model import Employee, EmployeeQuery, EmployeeUpdate, NewEmployee
from src.hr_portal.hr_portal.employees.service import EmployeeService

# Tables whose rows point at an employee through employee_id.
_OWNED = ("reviews", "user_badges", "enrollments", "documents", "leave_requests", "attendance_records")


class InMemoryStore:
    """Row store with snapshot/restore transactions, mirroring the MySQL cascade."""

    def __init__(self):
        self.tables = {name: [] for name in ("users", "employees", "goals", *_OWNED)}
        self.fail_on_table = None

    def seed_employee(self, employee_id, user_id):
        self.tables["users"].append({"user_id": user_id})
        self.tables["employees"].append({"employee_id": employee_id, "user_id": user_id})
        review_id = employee_id * 10
        self.tables["reviews"].append({"review_id": review_id, "employee_id": employee_id, "reviewer_id": None})
        self.tables["goals"].append({"goal_id": review_id, "review_id": review_id})
        for name in _OWNED[1:]:
            self.tables[name].append({"employee_id": employee_id})

    def snapshot(self):
        return copy.deepcopy(self.tables)

    def restore(self, snap):
        self.tables = snap


class FakeDeletion:
    def __init__(self, store, employees_by_id):
        self._store = store
        self._employees = employees_by_id

    def lock_employee(self, employee_id):
        if not any(r["employee_id"] == employee_id for r in self._store.tables["employees"]):
            return None
        return self._employees.get(employee_id)

    def count_reviews_as_reviewer(self, employee_id):
        return sum(1 for r in self._store.tables["reviews"] if r["reviewer_id"] == employee_id)

    def delete_rows(self, step, key_value):
        if self._store.fail_on_table == step.table:
            raise StorageUnavailableError("Lost connection to MySQL server during query")
        rows = self._store.tables[step.table]
        if step.table == "goals":
            review_ids = {r["review_id"] for r in self._store.tables["reviews"] if r["employee_id"] == key_value}
            keep = [r for r in rows if r["review_id"] not in review_ids]
        else:
            keep = [r for r in rows if r[step.key] != key_value]
        self._store.tables[step.table] = keep
        return len(rows) - len(keep)


class FakeEmployeesRepo:
    def __init__(self, store=None):
        self.store = store or InMemoryStore()
        self.by_id: dict[int, Employee] = {}
        self.unavailable = False
        self._next_id = 1

    def add(self, employee_id, *, email=None, code=None):
        employee = Employee(
            employee_id=employee_id,
            user_id=100 + employee_id,
            employee_code=code or f"E{employee_id:03d}",
            first_name="Ann",
            last_name=f"Lee{employee_id}",
            email=email or f"ann{employee_id}@example.com",
            department="Finance",
            designation="Analyst",
            employment_status=EmploymentStatus.ACTIVE,
            hired_date=date(2020, 1, 1),
        )
        self.by_id[employee_id] = employee
        self.store.seed_employee(employee_id, employee.user_id)
        self._next_id = max(self._next_id, employee_id + 1)
        return employee

    def get_by_id(self, employee_id):
        return self.by_id.get(int(employee_id))

    def get_by_user_id(self, user_id):
        return next((e for e in self.by_id.values() if e.user_id == user_id), None)

    def find_by_email_or_code(self, *, email, employee_code, exclude_id=None):
        return next(
            (
                e
                for e in self.by_id.values()
                if e.employee_id != exclude_id
                and ((email and e.email == email) or (employee_code and e.employee_code == employee_code))
            ),
            None,
        )

    def list(self, query):
        if self.unavailable:
            raise StorageUnavailableError("Table 'hr.employees' doesn't exist")
        return [e for e in self.by_id.values() if query.department in (None, e.department)]

    def create(self, new, *, password_hash):
        self.last_password_hash = password_hash
        employee = self.add(self._next_id, email=new.email, code=new.employee_code)
        employee = replace(employee, first_name=new.first_name, last_name=new.last_name)
        self.by_id[employee.employee_id] = employee
        return employee

    def set_status(self, employee_id, status):
        self.by_id[employee_id] = replace(self.by_id[employee_id], employment_status=status)

    def update(self, employee_id, changes):
        self.last_update = changes
        current = self.by_id.get(employee_id)
        if not current:
            return None
        fields = {k: v for k, v in vars(changes).items() if v is not None}
        if "phone_number" in fields:
            fields["phone_number"] = fields["phone_number"] or None
        self.by_id[employee_id] = replace(current, **fields)
        return self.by_id[employee_id]

    @contextmanager
    def transaction(self):
        snap = self.store.snapshot()
        try:
            yield FakeDeletion(self.store, self.by_id)
        except Exception:
            self.store.restore(snap)
            raise


class FakeMailer:
    def __init__(self, ok=True):
        self.ok = ok
        self.sent = []
        self.bodies = []

    def send_email(self, *, to, subject, html=None, text=None):
        self.sent.append(to)
        self.bodies.append(text)
        return self.ok


class FakePasswords:
    setup_hours = 24

    def __init__(self):
        self.issued = []

    def issue_setup_token(self, user_id):
        self.issued.append(user_id)
        return f"tok{len(self.issued)}"

    def setup_url(self, token):
        return f"http://hr.local/auth/setup-password?token={token}"


def _new(**overrides):
    fields = dict(
        first_name="Ben",
        last_name="Ng",
        email="Ben@Example.com",
        employee_code="E900",
        department="Ops",
        designation="Clerk",
        hired_date=date(2024, 5, 1),
    )
    fields.update(overrides)
    return NewEmployee(**fields)


def _rows_for(store, employee_id):
    total = 0
    for name in _OWNED:
        total += sum(1 for r in store.tables[name] if r.get("employee_id") == employee_id)
    total += sum(1 for r in store.tables["employees"] if r["employee_id"] == employee_id)
    return total


@pytest.fixture()
def repo():
    return FakeEmployeesRepo()


@pytest.fixture()
def mailer():
    return FakeMailer()


@pytest.fixture()
def service(repo, mailer):
    return EmployeeService(repo, mailer, login_url="http://hr.local/login")


def test_create_hashes_password_and_sends_welcome(service, repo, mailer):
    employee = service.create(_new(), password="s3cret!")

    assert employee.email == "ben@example.com"
    assert check_password_hash(repo.last_password_hash, "s3cret!")
    assert mailer.sent == ["ben@example.com"]


def test_create_survives_mail_failure(repo):
    service = EmployeeService(repo, FakeMailer(ok=False))
    assert service.create(_new()).employee_code == "E900"


def test_create_duplicate_email_conflicts(service, repo):
    repo.add(1, email="ben@example.com")

    with pytest.raises(ConflictError):
        service.create(_new())


def test_create_requires_fields(service):
    with pytest.raises(ValidationError):
        service.create(_new(department="  "))
    with pytest.raises(ValidationError):
        service.create(_new(hired_date=None))


def test_get_unknown_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.get(42)


def test_list_degrades_to_empty(service, repo):
    repo.add(1)
    repo.unavailable = True
    assert service.list(EmployeeQuery()) == []


def test_deactivate_keeps_rows(service, repo):
    repo.add(1)

    employee = service.deactivate(1)

    assert employee.employment_status == EmploymentStatus.INACTIVE
    assert _rows_for(repo.store, 1) == 7


def test_deactivate_unknown(service):
    with pytest.raises(NotFoundError):
        service.deactivate(3)


def test_hard_delete_removes_everything_owned(service, repo):
    repo.add(1)
    repo.add(2)

    report = service.hard_delete(1)

    assert _rows_for(repo.store, 1) == 0
    assert not any(r["user_id"] == 101 for r in repo.store.tables["users"])
    assert [g["review_id"] for g in repo.store.tables["goals"]] == [20]
    assert report.deleted["attendance_records"] == 1
    assert list(report.deleted) == [step.table for step in HARD_DELETE_PLAN]
    # untouched neighbour
    assert _rows_for(repo.store, 2) == 7


def test_hard_delete_blocked_while_reviewer(service, repo):
    repo.add(1)
    repo.add(2)
    repo.store.tables["reviews"].append({"review_id": 99, "employee_id": 2, "reviewer_id": 1})
    before = repo.store.snapshot()

    with pytest.raises(DependencyError, match="reviewer for 1 review"):
        service.hard_delete(1)

    assert repo.store.tables == before


def test_hard_delete_failure_rolls_back_every_step(service, repo):
    repo.add(1)
    repo.store.fail_on_table = "employees"
    before = repo.store.snapshot()

    with pytest.raises(StorageUnavailableError):
        service.hard_delete(1)

    assert repo.store.tables == before


def test_hard_delete_unknown_is_not_found(service):
    with pytest.raises(NotFoundError):
        service.hard_delete(404)


def test_create_without_password_mails_setup_link(repo, mailer):
    passwords = FakePasswords()
    service = EmployeeService(repo, mailer, login_url="http://hr.local/login", passwords=passwords)

    employee = service.create(_new())

    assert passwords.issued == [employee.user_id]
    assert "http://hr.local/auth/setup-password?token=tok1" in mailer.bodies[0]


def test_create_with_password_has_no_setup_link(repo, mailer):
    passwords = FakePasswords()
    service = EmployeeService(repo, mailer, passwords=passwords)

    service.create(_new(), password="s3cret!!")

    assert passwords.issued == []
    assert "setup-password" not in mailer.bodies[0]


def test_resend_setup_link_issues_new_token(repo, mailer):
    passwords = FakePasswords()
    service = EmployeeService(repo, mailer, passwords=passwords)
    repo.add(1)

    assert service.resend_setup_link(1) is True
    assert service.resend_setup_link(1) is True
    assert passwords.issued == [101, 101]
    assert "token=tok2" in mailer.bodies[-1]


def test_resend_setup_link_needs_password_links(service, repo):
    repo.add(1)
    with pytest.raises(InvalidStateError):
        service.resend_setup_link(1)


def test_update_changes_only_given_fields(service, repo):
    repo.add(1)

    employee = service.update(1, EmployeeUpdate(designation=" Senior Analyst ", email="ANN.NEW@example.com"))

    assert employee.designation == "Senior Analyst"
    assert employee.email == "ann.new@example.com"
    assert employee.department == "Finance"


def test_update_to_email_of_other_employee_conflicts(service, repo):
    repo.add(1)
    repo.add(2)

    with pytest.raises(ConflictError):
        service.update(1, EmployeeUpdate(email="ann2@example.com"))
    with pytest.raises(ConflictError):
        service.update(1, EmployeeUpdate(employee_code="E002"))


def test_update_keeping_own_email_is_allowed(service, repo):
    repo.add(1)
    assert service.update(1, EmployeeUpdate(email="ann1@example.com", first_name="Anna")).first_name == "Anna"


def test_update_blank_required_field_is_rejected(service, repo):
    repo.add(1)
    with pytest.raises(ValidationError):
        service.update(1, EmployeeUpdate(last_name="  "))


def test_update_unknown_employee(service):
    with pytest.raises(NotFoundError):
        service.update(9, EmployeeUpdate(first_name="X"))


def test_empty_update_returns_current(service, repo):
    employee = repo.add(1)
    assert service.update(1, EmployeeUpdate()) == employee


def test_profile_update_limited_to_name_and_phone(service, repo):
    repo.add(1)

    employee = service.update_profile(1, first_name="Anna", phone_number="555-0101")

    assert (employee.first_name, employee.phone_number) == ("Anna", "555-0101")
    assert repo.last_update.email is None
    assert repo.last_update.department is None


def test_profile_blank_phone_clears_it(service, repo):
    repo.add(1)
    service.update_profile(1, phone_number="555-0101")

    assert service.update_profile(1, phone_number=" ").phone_number is None
