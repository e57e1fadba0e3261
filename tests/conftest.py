"""
Pytest configuration and fixtures for testing.

This file provides reusable test fixtures for:
- Database setup/teardown
- FastAPI test client
- Signed-in users (session cookie or bearer token)
"""

import os

# Point the app at SQLite before anything imports the engine
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_jobtrackr.db")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from jobtrackr.core.database import Base, get_db
from jobtrackr.core.security import get_password_hash
from jobtrackr.models.user import User
from jobtrackr.services.auth_service import issue_session_token
from main import app


# Use in-memory SQLite for testing (fast, isolated)
SQLALCHEMY_TEST_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_TEST_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

TEST_EMAIL = "a@x.com"
TEST_PASSWORD = "secret1"


@pytest.fixture
def db_session():
    """
    Create a fresh database for each test.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def client(db_session):
    """
    FastAPI test client with overridden database dependency.
    """
    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def create_user(db_session, email=TEST_EMAIL, password=TEST_PASSWORD, name="Test User"):
    """Insert a credentials-path user directly."""
    user = User(
        email=email,
        hashed_password=get_password_hash(password) if password else None,
        name=name,
    )
    db_session.add(user)
    db_session.commit()
    db_session.refresh(user)
    return user


def bearer_headers(user):
    """Authorization header carrying a session token for user."""
    return {"Authorization": f"Bearer {issue_session_token(user)}"}


@pytest.fixture
def user(db_session):
    return create_user(db_session)


@pytest.fixture
def auth_client(client, user):
    """Test client signed in through the credentials endpoint (session cookie)."""
    response = client.post("/api/auth/login", json={"email": TEST_EMAIL, "password": TEST_PASSWORD})
    assert response.status_code == 200
    return client


@pytest.fixture
def other_user(db_session):
    return create_user(db_session, email="other@example.com", password="othersecret", name="Other")


@pytest.fixture
def sample_application_data():
    """Sample application payload for testing"""
    return {
        "company": "Google",
        "position": "Développeur Frontend",
        "contract": "Alternance",
        "status": "Envoyé",
        "link": "https://careers.google.com/jobs/123",
        "contactName": "Jane Doe",
        "contactEmail": "jane@google.com",
        "contactPhone": "+33 6 12 34 56 78",
        "tags": ["React", "Node.js", "Paris"],
        "notes": "Referred by a former colleague",
        "appliedAt": "2025-03-01T09:30:00Z",
    }
