"""
Pytest configuration and fixtures

Tests run against an in-memory SQLite database. Tables are created fresh for
every test and dropped afterwards, so nothing leaks between tests.
"""
import os
import sys
from datetime import datetime, timezone
from uuid import uuid4

import pytest

# Configure the app before anything imports core.config
os.environ["SECRET_KEY"] = "test-secret-key-that-is-long-enough-for-hs256"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["REDIS_URL"] = ""
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["LOG_FORMAT"] = "text"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ.pop("AI_GATEWAY_API_KEY", None)
os.environ.pop("ELECTRICITY_MAP_API_KEY", None)

# Add the parent directory to the path so we can import from services
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

from fastapi.testclient import TestClient  # noqa: E402

from core.database import Base, SessionLocal, engine, get_db  # noqa: E402
from core.security import create_access_token  # noqa: E402
from main import app  # noqa: E402
from models import Profile  # noqa: E402


@pytest.fixture(scope="function")
def db_session():
    """
    Fresh schema per test, shared with the app via dependency override.
    """
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()

    def _override_get_db():
        try:
            yield session
        finally:
            pass  # session lifecycle managed by fixture

    app.dependency_overrides[get_db] = _override_get_db
    yield session

    app.dependency_overrides.pop(get_db, None)
    session.rollback()
    session.close()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """TestClient wired to the overridden DB session."""
    return TestClient(app)


def make_profile(db_session, username="Test User", green_points=0, created_at=None, **totals):
    profile = Profile(
        id=uuid4(),
        username=username,
        green_points=green_points,
        co2_emitted=totals.get("co2_emitted", 0.0),
        total_data_used_mb=totals.get("total_data_used_mb", 0.0),
        created_at=created_at or datetime.now(timezone.utc),
    )
    db_session.add(profile)
    db_session.flush()
    return profile


@pytest.fixture
def profile_factory(db_session):
    def _make(**kwargs):
        return make_profile(db_session, **kwargs)
    return _make


@pytest.fixture
def test_user(db_session):
    return make_profile(db_session, username="greenfan")


@pytest.fixture
def auth_headers(test_user):
    token = create_access_token({"sub": str(test_user.id)})
    return {"Authorization": f"Bearer {token}"}
