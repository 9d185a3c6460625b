# tests/conftest.py
import os
import asyncio
from datetime import date, datetime, timezone

# Set environment variables for testing (before the app is imported)
os.environ["SECRET_KEY"] = "testing_secret_key_for_development_only"
os.environ["STORE_BACKEND"] = "memory"
os.environ["DISABLE_RATE_LIMIT"] = "1"
os.environ["APP_TIMEZONE"] = "UTC"
os.environ.pop("SMTP_SERVER", None)

import pytest
from fastapi.testclient import TestClient
from punchclock import db
from punchclock.models.credential import Credential
from punchclock.models.employee import Employee
from punchclock.models.enums import Role
from punchclock.services.auth_service import create_access_token, hash_password
from punchclock.store.memory_store import MemoryStore
from main import app

PASSWORD = "password123"


def run(coro):
    return asyncio.run(coro)


def at(*args) -> datetime:
    return datetime(*args, tzinfo=timezone.utc)


class FixedClock:
    """Callable clock the tests can move by hand."""

    def __init__(self, now: datetime):
        self.now = now

    def __call__(self) -> datetime:
        return self.now


class RecordingSender:
    def __init__(self, fail: bool = False):
        self.sent = []
        self.fail = fail

    async def __call__(self, to, subject, body):
        if self.fail:
            raise RuntimeError("SMTP down")
        self.sent.append((to, subject, body))
        return True


async def add_employee(store, first_name="Jane", last_name="Doe", email="jane@example.com", **fields) -> Employee:
    return await store.insert_employee(Employee(
        first_name=first_name,
        last_name=last_name,
        email=email,
        department=fields.get("department", "Operations"),
        position=fields.get("position", "Associate"),
        hire_date=fields.get("hire_date", date(2024, 1, 15)),
    ))


async def add_account(store, email, role, employee_id=None, password=PASSWORD) -> Credential:
    return await store.insert_credential(Credential(
        employee_id=employee_id,
        email=email,
        password_hash=hash_password(password),
        role=role,
    ))


def auth_header(email: str, role: Role) -> dict:
    return {"Authorization": f"Bearer {create_access_token(email, role)}"}


@pytest.fixture
def store():
    fresh = MemoryStore()
    db.use_store(fresh)
    return fresh


@pytest.fixture
def client(store):
    with TestClient(app) as c:
        yield c


@pytest.fixture
def employee(store):
    emp = run(add_employee(store))
    run(add_account(store, emp.email, Role.EMPLOYEE, employee_id=emp.id))
    return emp


@pytest.fixture
def other_employee(store):
    emp = run(add_employee(store, "John", "Roe", "john@example.com"))
    run(add_account(store, emp.email, Role.EMPLOYEE, employee_id=emp.id))
    return emp


@pytest.fixture
def admin(store):
    emp = run(add_employee(store, "Ada", "Admin", "admin@example.com", department="Administration"))
    run(add_account(store, emp.email, Role.ADMIN, employee_id=emp.id))
    return emp


@pytest.fixture
def employee_headers(employee):
    return auth_header(employee.email, Role.EMPLOYEE)


@pytest.fixture
def other_headers(other_employee):
    return auth_header(other_employee.email, Role.EMPLOYEE)


@pytest.fixture
def admin_headers(admin):
    return auth_header(admin.email, Role.ADMIN)
