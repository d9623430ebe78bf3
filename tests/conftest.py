"""Pytest configuration and fixtures."""
import os

# Settings are read at import time
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("CONTENT_GENERATOR_PROVIDER", "local_stub")
os.environ.setdefault("LOG_FORMAT", "text")

from datetime import datetime, timedelta, timezone

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from momentum.clock import Clock, get_clock
from momentum.db import Base, get_db
from momentum.errors import ContentGenerationError
from momentum.main import app
from momentum.services.content_generator import GeneratedStep, GeneratedTask, get_content_generator
from momentum.settings import settings

# Use in-memory SQLite for tests
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FixedClock(Clock):
    """Clock that only moves when a test moves it."""

    def __init__(self, now: datetime):
        self.current = now

    def now(self) -> datetime:
        return self.current

    def advance(self, **kwargs) -> None:
        self.current = self.current + timedelta(**kwargs)


class FakeGenerator:
    """
    Scripted content generator recording every call.

    Set `roadmap`, `tasks` or `feedback` to change the answers, or the
    matching `*_error` attribute to an exception to raise instead.
    """

    def __init__(self):
        self.roadmap = ["Research", "Practice", "Ship"]
        self.tasks = ["Read chapter one", "Write notes", "Do exercises"]
        self.feedback = "Nice work today."
        self.roadmap_error = None
        self.tasks_error = None
        self.feedback_error = None
        self.before_tasks = None
        self.observer = None
        self.calls = []

    def _record(self, call):
        self.calls.append(call)
        if self.observer:
            self.observer(call[0])

    def generate_roadmap(self, goal_description):
        self._record(("roadmap", goal_description))
        if self.roadmap_error:
            raise self.roadmap_error
        return [GeneratedStep(order=i, title=title) for i, title in enumerate(self.roadmap, start=1)]

    def generate_daily_tasks(self, goal_description, current_step_title, prior_day_tasks):
        self._record(("tasks", goal_description, current_step_title, list(prior_day_tasks)))
        if self.tasks_error:
            raise self.tasks_error
        if self.before_tasks:
            self.before_tasks()
        return [GeneratedTask(title=title) for title in self.tasks]

    def generate_feedback(self, goal_description, summary):
        self._record(("feedback", goal_description, summary))
        if self.feedback_error:
            raise self.feedback_error
        return self.feedback

    def count(self, kind: str) -> int:
        return sum(1 for call in self.calls if call[0] == kind)


@pytest.fixture(scope="function")
def db_session():
    """Create a fresh database session for each test."""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def generator():
    return FakeGenerator()


@pytest.fixture(scope="function")
def failing_generator():
    """Generator whose every call fails as if the provider were down."""
    fake = FakeGenerator()
    fake.roadmap_error = ContentGenerationError("provider down")
    fake.tasks_error = ContentGenerationError("provider down")
    fake.feedback_error = ContentGenerationError("provider down")
    return fake


@pytest.fixture(scope="function")
def clock():
    return FixedClock(datetime(2026, 3, 10, 9, 0, tzinfo=timezone.utc))


@pytest.fixture(scope="function")
def client(db_session, generator, clock, monkeypatch):
    """Create a test client with overridden database, generator and clock."""
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    # Startup validation inspects the test database
    monkeypatch.setattr("momentum.startup.engine", engine)

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_content_generator] = lambda: generator
    app.dependency_overrides[get_clock] = lambda: clock
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture(scope="function")
def test_user(db_session):
    """Create a regular test user."""
    from momentum.models.auth import User

    user = User(email="test@example.com", display_name="Test User")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def other_user(db_session):
    """Create a second user for ownership checks."""
    from momentum.models.auth import User

    user = User(email="other@example.com", display_name="Other User")
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


@pytest.fixture(scope="function")
def auth_client(client, db_session, test_user):
    """Test client carrying a valid session cookie for test_user."""
    from momentum.services.auth import create_session

    session = create_session(db_session, test_user.id)
    client.cookies.set(settings.SESSION_COOKIE_NAME, session.session_token)
    return client
