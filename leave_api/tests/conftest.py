"""
Pytest configuration and fixtures
"""
import os

os.environ.setdefault("DATABASE_URL", "sqlite://")
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-for-leave-api-tests-0123456789")
os.environ.setdefault("ACCRUAL_SCHEDULER_ENABLED", "false")

from datetime import date
from decimal import Decimal

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from sqlalchemy.engine import Engine
from leave_api.main import app
from leave_api.db.base import Base
from leave_api.core.deps import get_db
from leave_api.core.security import hash_password
from leave_api.models import (
    User,
    Role,
    EmployeeDetails,
    EmploymentType,
    LeaveEntitlement,
)


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
    finally:
        db.rollback()
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


@pytest.fixture
def make_user(db):
    """
    Factory for users with employment details.

    Inserts rows directly; no entitlement row is created unless
    casual_remaining / annual_remaining is passed.
    """
    counter = {"n": 0}

    def _make_user(
        role=Role.EMPLOYEE,
        manager=None,
        employment_type=EmploymentType.CONFIRMED,
        confirmation_date=None,
        probation_start_date=None,
        last_accrual_date=None,
        casual_remaining=None,
        annual_remaining=None,
        year=None,
        name=None,
    ):
        counter["n"] += 1
        n = counter["n"]
        user = User(
            employee_id=f"EMP{n:03d}",
            name=name or f"User {n}",
            email=f"user{n}@example.com",
            password_hash=hash_password(DEFAULT_PASSWORD),
            role=Role(role).value,
            manager_id=manager.id if manager else None,
        )
        db.add(user)
        db.flush()
        db.add(EmployeeDetails(
            user_id=user.id,
            employment_type=EmploymentType(employment_type).value,
            confirmation_date=confirmation_date,
            probation_start_date=probation_start_date,
            last_accrual_date=last_accrual_date,
        ))
        if casual_remaining is not None or annual_remaining is not None:
            casual = Decimal(str(casual_remaining or 0))
            annual = Decimal(str(annual_remaining or 0))
            db.add(LeaveEntitlement(
                user_id=user.id,
                year=year or date.today().year,
                annual_leave_entitled=annual,
                annual_leave_remaining=annual,
                annual_leave_taken=Decimal("0"),
                casual_leave_entitled=casual,
                casual_leave_remaining=casual,
                casual_leave_taken=Decimal("0"),
                maternity_leave_entitled=Decimal("0"),
                maternity_leave_remaining=Decimal("0"),
                maternity_leave_taken=Decimal("0"),
                paternity_leave_entitled=Decimal("0"),
                paternity_leave_remaining=Decimal("0"),
                paternity_leave_taken=Decimal("0"),
                birthday_leave_entitled=Decimal("1"),
                birthday_leave_remaining=Decimal("1"),
                birthday_leave_taken=Decimal("0"),
            ))
        db.commit()
        db.refresh(user)
        return user

    return _make_user


def get_auth_token(client, email: str, password: str = DEFAULT_PASSWORD) -> str:
    """Helper to get auth token"""
    response = client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return response.json()["access_token"]


@pytest.fixture
def auth_headers(client):
    def _auth_headers(user, password: str = DEFAULT_PASSWORD):
        token = get_auth_token(client, user.email, password)
        return {"Authorization": f"Bearer {token}"}
    return _auth_headers
