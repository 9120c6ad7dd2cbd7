"""Tests for main application endpoints."""

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from ratemyrez.core import context as context_module
from ratemyrez.core.config import settings
from ratemyrez.core.context import AppContext, ContextState, get_app_context, set_app_context
from ratemyrez.core.errors import (
    AuthenticationRequired,
    BackendUnavailable,
    DomainRejected,
    NotReviewAuthor,
    RecordNotFound,
)
from ratemyrez.main import app, status_for
from ratemyrez.services.subscriptions import home_feed_query


def test_health_check(client):
    """Test health check endpoint."""
    response = client.get("/api/health")
    assert response.status_code == 200
    data = response.json()
    assert data["status"] == "healthy"
    assert data["service"] == "ratemyrez"
    assert data["backend"] == "ready"


def test_backend_not_connected():
    """Pages and the API answer 503 until the backend is connected."""
    unconnected = AppContext(settings, create_engine("sqlite://"))
    app.dependency_overrides[get_app_context] = lambda: unconnected
    try:
        client = TestClient(app)
        assert client.get("/api/health").json()["backend"] == "uninitialized"

        page = client.get("/")
        assert page.status_code == 503
        assert "Database not connected yet!" in page.text

        response = client.get("/api/properties/v1")
        assert response.status_code == 503
        assert response.json() == {"detail": "Database not connected yet!"}
    finally:
        app.dependency_overrides.clear()


def test_error_status_mapping():
    assert status_for(AuthenticationRequired()) == 401
    assert status_for(NotReviewAuthor()) == 403
    assert status_for(RecordNotFound("reviews", 1)) == 404
    assert status_for(BackendUnavailable()) == 503
    assert status_for(DomainRejected("@uwaterloo.ca")) == 400


class TestAppContext:
    """Tests for the application context lifecycle."""

    def test_lifecycle(self):
        engine = create_engine(
            "sqlite:///:memory:",
            connect_args={"check_same_thread": False},
            poolclass=StaticPool,
        )
        context = AppContext(settings, engine)
        assert context.state == ContextState.UNINITIALIZED
        context.connect()
        assert context.ready
        assert context.require_store() is context.store
        context.close()
        assert context.state == ContextState.CLOSED

    def test_replacing_context_closes_previous(self, context, store, monkeypatch):
        monkeypatch.setattr(context_module, "_current", context)
        store.subscribe(home_feed_query(20), lambda snapshot: None)

        replacement = AppContext(settings, context.engine).connect()
        set_app_context(replacement)

        assert get_app_context() is replacement
        assert context.state == ContextState.CLOSED
        assert store.subscription_count == 0
