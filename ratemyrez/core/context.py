"""Application context: the one place that holds the store and auth provider.

Lifecycle is uninitialized -> connecting -> ready -> closed. Replacing the
current context closes the old one, which tears down its live queries.
"""

import logging
from collections.abc import Callable
from datetime import timedelta
from enum import Enum

from sqlalchemy import Engine

from ratemyrez import models  # noqa: F401  (registers tables on Base.metadata)
from ratemyrez.core.config import Settings, settings
from ratemyrez.core.database import Base, build_session_factory, engine
from ratemyrez.core.errors import BackendUnavailable
from ratemyrez.services.auth import AuthProvider
from ratemyrez.services.email import send_password_reset_email
from ratemyrez.services.store import DocumentStore

logger = logging.getLogger(__name__)


class ContextState(str, Enum):
    UNINITIALIZED = "uninitialized"
    CONNECTING = "connecting"
    READY = "ready"
    CLOSED = "closed"


class AppContext:
    """Backend handles shared by every request and view."""

    def __init__(
        self,
        app_settings: Settings,
        db_engine: Engine,
        mailer: Callable[[str, str], bool] = send_password_reset_email,
    ) -> None:
        self.settings = app_settings
        self.engine = db_engine
        self.mailer = mailer
        self.state = ContextState.UNINITIALIZED
        self.store: DocumentStore | None = None
        self.auth: AuthProvider | None = None

    def connect(self) -> "AppContext":
        """Create tables and build the store and auth provider."""
        self.state = ContextState.CONNECTING
        Base.metadata.create_all(bind=self.engine)
        session_factory = build_session_factory(self.engine)
        self.store = DocumentStore(session_factory, self.settings.APP_ID)
        self.auth = AuthProvider(
            session_factory,
            password_min_length=self.settings.PASSWORD_MIN_LENGTH,
            reset_token_ttl=timedelta(minutes=self.settings.RESET_TOKEN_TTL_MINUTES),
            mailer=self.mailer,
        )
        self.state = ContextState.READY
        logger.info("Backend ready (app_id=%s)", self.settings.APP_ID)
        return self

    @property
    def ready(self) -> bool:
        return self.state == ContextState.READY

    def require_store(self) -> DocumentStore:
        if not self.ready or self.store is None:
            raise BackendUnavailable()
        return self.store

    def close(self) -> None:
        if self.store is not None:
            self.store.close()
        self.state = ContextState.CLOSED


_current = AppContext(settings, engine)


def get_app_context() -> AppContext:
    """Dependency returning the current application context."""
    return _current


def set_app_context(context: AppContext) -> AppContext:
    """Install a new context, closing the one it replaces."""
    global _current
    previous = _current
    _current = context
    if previous is not context:
        previous.close()
    return context
