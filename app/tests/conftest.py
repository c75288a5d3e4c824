"""
Pytest configuration and fixtures
"""
import os

# Settings are read at import time; give the app a test configuration first
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-elra-leave-backend")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("APP_ENV", "local")
os.environ.setdefault("BCRYPT_ROUNDS", "4")

from datetime import timedelta  # noqa: E402
from types import SimpleNamespace  # noqa: E402

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, event  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402
from sqlalchemy.engine import Engine  # noqa: E402

from app.main import app  # noqa: E402
from app.db.base import Base  # noqa: E402
from app.db.init_db import seed_roles  # noqa: E402
from app.core.deps import get_db  # noqa: E402
from app.core.security import create_access_token, hash_password  # noqa: E402
from app.constants import HR_DEPARTMENT_NAME  # noqa: E402
from app.models import Department, Employee  # noqa: E402
from app.utils.datetime_utils import today_utc  # noqa: E402


# Use in-memory SQLite for testing
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


# Enable foreign keys for SQLite
@event.listens_for(Engine, "connect")
def set_sqlite_pragma(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

DEFAULT_PASSWORD = "password123"


@pytest.fixture(scope="function")
def db():
    """Create a fresh database for each test"""
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    db = TestingSessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def client(db):
    """Test client fixture with database override"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


def future(days: int):
    """A date ``days`` from today (UTC)"""
    return today_utc() + timedelta(days=days)


def create_employee(db, roles, department, code, first_name, role, active=True, password=DEFAULT_PASSWORD):
    employee = Employee(
        employee_code=code,
        first_name=first_name,
        last_name="Tester",
        email=f"{code.lower()}@elra.test",
        role_id=roles[role].id,
        department_id=department.id,
        password_hash=hash_password(password),
        active=active,
    )
    db.add(employee)
    db.commit()
    db.refresh(employee)
    return employee


@pytest.fixture
def roles(db):
    """The five-level role ladder"""
    roles = seed_roles(db)
    db.commit()
    return roles


@pytest.fixture
def departments(db):
    departments = SimpleNamespace(
        hr=Department(name=HR_DEPARTMENT_NAME, active=True),
        engineering=Department(name="Engineering", active=True),
        marketing=Department(name="Marketing", active=True),
        executive=Department(name="Executive", active=True),
        research=Department(name="Research", active=True),
    )
    db.add_all(vars(departments).values())
    db.commit()
    return departments


@pytest.fixture
def org(db, roles, departments):
    """
    A small organisation:
    Super Admin (Executive), HR HOD + HR staff, Engineering HOD/manager/staff/viewer,
    Marketing HOD + staff, and a Research staff member whose department has no HOD.
    """
    return SimpleNamespace(
        super_admin=create_employee(db, roles, departments.executive, "SA001", "Sara", "SUPER_ADMIN"),
        hr_hod=create_employee(db, roles, departments.hr, "HR001", "Helen", "HOD"),
        hr_staff=create_employee(db, roles, departments.hr, "HR002", "Harry", "STAFF"),
        eng_hod=create_employee(db, roles, departments.engineering, "ENG001", "Evan", "HOD"),
        eng_manager=create_employee(db, roles, departments.engineering, "ENG002", "Maya", "MANAGER"),
        eng_staff=create_employee(db, roles, departments.engineering, "ENG003", "Sam", "STAFF"),
        eng_viewer=create_employee(db, roles, departments.engineering, "ENG004", "Victor", "VIEWER"),
        mkt_hod=create_employee(db, roles, departments.marketing, "MKT001", "Mark", "HOD"),
        mkt_staff=create_employee(db, roles, departments.marketing, "MKT002", "Mia", "STAFF"),
        research_staff=create_employee(db, roles, departments.research, "RES001", "Rita", "STAFF"),
        departments=departments,
    )


@pytest.fixture
def auth_headers():
    """Build bearer headers for an employee"""
    def _headers(employee):
        token = create_access_token({"sub": str(employee.id)})
        return {"Authorization": f"Bearer {token}"}
    return _headers


@pytest.fixture
def submit_leave(client, auth_headers):
    """POST /leave as ``employee``; returns the raw response"""
    def _submit(employee, start_in=10, length=2, leave_type="Annual", reason="Family trip"):
        payload = {
            "leave_type": leave_type,
            "start_date": str(future(start_in)),
            "end_date": str(future(start_in + length)),
            "days": max(length, 1),
            "reason": reason,
        }
        return client.post("/api/v1/leave", json=payload, headers=auth_headers(employee))
    return _submit
