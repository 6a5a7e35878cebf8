"""Test configuration and fixtures for the habitpals backend tests."""

import datetime
import os
import sys
import pathlib
import pytest
from unittest.mock import patch


from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

BACKEND_DIR = pathlib.Path(__file__).resolve().parents[1]
if str(BACKEND_DIR) not in sys.path:
    sys.path.insert(0, str(BACKEND_DIR))

# Set test environment before importing backend modules
os.environ["TESTING"] = "true"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["SESSION_SECRET_KEY"] = "test_secret_key"
os.environ["TESTING_MODE"] = "True"
os.environ["SLACK_TOKEN"] = ""


@pytest.fixture(autouse=True)
def test_engine():
    """Create a fresh in-memory database for every test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    # Ensure models are imported so tables are registered in SQLModel.metadata
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    yield engine
    engine.dispose()


@pytest.fixture
def test_session(test_engine):
    """Create a test database session."""
    with Session(test_engine) as session:
        yield session


@pytest.fixture
def override_get_session(test_session):
    """Override the get_session dependency for testing."""

    def _override_get_session():
        yield test_session

    return _override_get_session


@pytest.fixture
def test_app(override_get_session):
    """Create a test FastAPI application."""
    # Patch update_database to skip migrations in tests
    with patch("app.update_database"):
        from app import create_app

        app = create_app()
    from models.common import get_session

    app.dependency_overrides[get_session] = override_get_session
    yield app
    del app.dependency_overrides[get_session]


@pytest.fixture
def client(test_app):
    """Create a test client."""
    with TestClient(test_app) as client:
        yield client


def make_user(session: Session, user_id: str, uid: str, username: str, **kwargs):
    from models.auth import User

    user = User(id=user_id, uid=uid, username=username, **kwargs)
    session.add(user)
    session.commit()
    return user


@pytest.fixture
def alice(test_session):
    return make_user(
        test_session,
        "u1",
        "AAA111",
        "alice",
        nickname="Alice",
        last_seen_at=datetime.datetime.now(datetime.timezone.utc),
    )


@pytest.fixture
def bob(test_session):
    return make_user(test_session, "u2", "BBB222", "bob", nickname="Bob")


@pytest.fixture
def carol(test_session):
    return make_user(test_session, "u3", "CCC333", "carol")


@pytest.fixture
def login_as(test_app):
    """Switch the authenticated user of the test client."""
    from routes.deps import get_current_user

    def _login_as(user):
        test_app.dependency_overrides[get_current_user] = lambda: user

    yield _login_as
    test_app.dependency_overrides.pop(get_current_user, None)


@pytest.fixture
def file_engine(tmp_path):
    """A file-backed database, so separate sessions really use separate connections"""
    engine = create_engine(
        f"sqlite:///{tmp_path / 'habitpals.sqlite'}",
        connect_args={"check_same_thread": False, "timeout": 10},
    )
    import models  # noqa: F401

    SQLModel.metadata.create_all(engine)
    with Session(engine) as session:
        make_user(session, "u1", "AAA111", "alice", nickname="Alice")
        make_user(session, "u2", "BBB222", "bob", nickname="Bob")
    yield engine
    engine.dispose()
