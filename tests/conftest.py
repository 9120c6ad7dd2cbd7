"""Shared fixtures: an in-memory backend, sessions and a test client."""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from ratemyrez.core.config import settings
from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.main import app
from ratemyrez.schemas.review import ReviewForm
from ratemyrez.services.session import SessionManager


@pytest.fixture
def test_engine():
    """Create an in-memory test database."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    yield engine
    engine.dispose()


@pytest.fixture
def sent_emails():
    """Reset emails captured instead of being sent, as (email, token) pairs."""
    return []


@pytest.fixture
def context(test_engine, sent_emails):
    """A connected application context with a capturing mailer."""

    def capture(email: str, token: str) -> bool:
        sent_emails.append((email, token))
        return True

    ctx = AppContext(settings, test_engine, mailer=capture).connect()
    yield ctx
    ctx.close()


@pytest.fixture
def store(context):
    return context.store


@pytest.fixture
def auth(context):
    return context.auth


@pytest.fixture
def make_session(context):
    """Factory for session managers, each with its own session storage."""

    def make(storage: dict | None = None) -> SessionManager:
        return SessionManager(
            context.auth,
            {} if storage is None else storage,
            settings.ALLOWED_EMAIL_DOMAIN,
        )

    return make


@pytest.fixture
def guest_session(make_session):
    return make_session()


@pytest.fixture
def student_session(make_session):
    """A verified session signed up with a school email."""
    session = make_session()
    session.sign_up("alice@uwaterloo.ca", "password123")
    return session


@pytest.fixture
def review_form():
    """Factory for review forms with sensible defaults."""

    def make(**overrides) -> ReviewForm:
        data = {"rating": 4, "rent": 1200, "distance": 10, "comment": "ok"}
        data.update(overrides)
        return ReviewForm(**data)

    return make


@pytest.fixture
def client(context):
    """Create a test client with the application context overridden."""
    app.dependency_overrides[get_app_context] = lambda: context
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def student_client(client):
    """Test client signed in as a verified student."""
    response = client.post(
        "/signup",
        data={"email": "bob@uwaterloo.ca", "password": "password123", "next_url": "/"},
        follow_redirects=False,
    )
    assert response.status_code == 303
    return client
