"""
Pytest configuration and fixtures

Every test gets a fresh in-memory SQLite schema. The app's ``get_db``
dependency is overridden so requests and fixtures share one database.
"""
import os
from datetime import date, datetime, timezone

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ.setdefault("SECRET_KEY", "test-secret-key")

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from trackcoach import models  # noqa: E402
from trackcoach.auth import create_access_token, hash_password  # noqa: E402
from trackcoach.db import Base, get_db  # noqa: E402
from trackcoach.main import app  # noqa: E402
from trackcoach.models import EventStatus, EventType, Gender, Role  # noqa: E402

engine = create_engine(
    "sqlite://",
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(autouse=True)
def _schema():
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    session = TestingSessionLocal()
    yield session
    session.close()


@pytest.fixture
def client():
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


# -------------------------------
# Users
# -------------------------------
@pytest.fixture
def make_user(db_session):
    counter = {"n": 0}

    def _make(role=Role.COACH, email=None, password="password123"):
        counter["n"] += 1
        user = models.AppUser(
            email=email or f"user{counter['n']}@example.com",
            first_name="Test",
            last_name=f"User{counter['n']}",
            password_hash=hash_password(password),
            role=role.value,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


def auth_headers(user):
    token = create_access_token({"sub": str(user.id)})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def headers_for():
    return auth_headers


@pytest.fixture
def coach(make_user):
    return make_user(Role.COACH, email="coach@example.com")


@pytest.fixture
def other_coach(make_user):
    return make_user(Role.COACH, email="other.coach@example.com")


@pytest.fixture
def parent(make_user):
    return make_user(Role.PARENT, email="parent@example.com")


@pytest.fixture
def coach_headers(coach):
    return auth_headers(coach)


@pytest.fixture
def other_coach_headers(other_coach):
    return auth_headers(other_coach)


# -------------------------------
# Domain factories
# -------------------------------
@pytest.fixture
def make_student(db_session):
    def _make(coach, name="Asha Runner", **fields):
        student = models.Student(
            coach_id=coach.id,
            name=name,
            gender=fields.pop("gender", Gender.FEMALE.value),
            date_of_birth=fields.pop("date_of_birth", date(2010, 5, 1)),
            joining_date=fields.pop("joining_date", date(2024, 1, 15)),
            **fields,
        )
        db_session.add(student)
        db_session.commit()
        db_session.refresh(student)
        return student

    return _make


@pytest.fixture
def make_event(db_session):
    def _make(coach, type=EventType.RUNNING, status=EventStatus.PLANNED, rounds=1,
              on=None, name="100m Sprint"):
        event = models.Event(
            coach_id=coach.id,
            name=name,
            type=type.value,
            date=on or datetime(2025, 3, 10, 9, 0, tzinfo=timezone.utc),
            distance="100m" if type is EventType.RUNNING else None,
            rounds=rounds,
            participants=[],
            status=status.value,
        )
        db_session.add(event)
        db_session.commit()
        db_session.refresh(event)
        return event

    return _make


@pytest.fixture
def make_performance(db_session):
    def _make(student, event, measurement, round=1, created_at=None, personal_best=False):
        performance = models.Performance(
            student_id=student.id,
            event_id=event.id,
            measurement=measurement,
            round=round,
            personal_best=personal_best,
        )
        if created_at is not None:
            performance.created_at = created_at
        db_session.add(performance)
        db_session.commit()
        db_session.refresh(performance)
        return performance

    return _make
