"""Session manager: the current identity and what it may do.

Sessions are anonymous by default. Whenever there is no active user the
manager signs in anonymously, so a log-out is always followed by a fresh
anonymous session. Sign-up, log-in and reset requests check the
university email suffix first; this is a soft gate applied here, not by the
auth provider.
"""

import logging
from collections.abc import Callable, MutableMapping
from typing import Any

from ratemyrez.core.errors import (
    AccountAlreadyExists,
    AuthError,
    BackendUnavailable,
    DomainRejected,
    InvalidCredential,
    InvalidResetToken,
)
from ratemyrez.schemas.user import SessionUser
from ratemyrez.services.auth import AuthProvider, ProviderError

logger = logging.getLogger(__name__)

SESSION_UID_KEY = "uid"
RESET_SENT_MESSAGE = "Reset link sent! Check your inbox."

SessionListener = Callable[[SessionUser | None], None]


def map_provider_error(exc: ProviderError) -> AuthError:
    """Collapse provider codes into the user-facing messages."""
    if exc.code == "auth/invalid-credential":
        return InvalidCredential()
    if exc.code == "auth/email-already-in-use":
        return AccountAlreadyExists()
    if exc.code == "auth/invalid-action-code":
        return InvalidResetToken()
    return AuthError(exc.message)


class SessionManager:
    """Owns the active session for one client.

    ``storage`` is where the signed-in uid is remembered between requests,
    normally the cookie-backed ``request.session``.
    """

    def __init__(
        self,
        auth: AuthProvider | None,
        storage: MutableMapping[str, Any],
        allowed_domain: str,
    ) -> None:
        self._auth = auth
        self._storage = storage
        self._allowed_domain = allowed_domain
        self._listeners: list[SessionListener] = []
        self._user: SessionUser | None = None
        self._restore()

    # -- state ---------------------------------------------------------------

    @property
    def current_user(self) -> SessionUser | None:
        return self._user

    @property
    def can_write(self) -> bool:
        return self._user is not None and not self._user.is_anonymous

    def get_current_user(self) -> SessionUser | None:
        return self._user

    def on_change(self, listener: SessionListener) -> Callable[[], None]:
        """Register for session changes; returns a function that unregisters."""
        self._listeners.append(listener)

        def remove() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return remove

    def _set_user(self, user: SessionUser | None) -> None:
        previous = self._user
        self._user = user
        if user is None:
            self._storage.pop(SESSION_UID_KEY, None)
        else:
            self._storage[SESSION_UID_KEY] = user.uid
        if previous != user:
            for listener in list(self._listeners):
                listener(user)
        if user is None:
            self._ensure_session()

    def _restore(self) -> None:
        if self._auth is None:
            return
        uid = self._storage.get(SESSION_UID_KEY)
        user = self._auth.get_user(uid) if uid else None
        if user is None:
            self._ensure_session()
        else:
            self._user = user

    def _ensure_session(self) -> None:
        if self._auth is None or self._user is not None:
            return
        self._set_user(self._auth.sign_in_anonymously())

    def _require_auth(self) -> AuthProvider:
        if self._auth is None:
            raise BackendUnavailable()
        return self._auth

    def _check_domain(self, email: str) -> str:
        email = email.strip()
        if not email.endswith(self._allowed_domain):
            raise DomainRejected(self._allowed_domain)
        return email

    # -- operations ----------------------------------------------------------

    def sign_up(self, email: str, password: str) -> SessionUser:
        """Create a verified account and make it the active session."""
        email = self._check_domain(email)
        auth = self._require_auth()
        try:
            user = auth.create_user_with_email_and_password(email, password)
        except ProviderError as exc:
            logger.info("Sign-up rejected: %s", exc.code)
            raise map_provider_error(exc) from exc
        self._set_user(user)
        return user

    def log_in(self, email: str, password: str) -> SessionUser:
        email = self._check_domain(email)
        auth = self._require_auth()
        try:
            user = auth.sign_in_with_email_and_password(email, password)
        except ProviderError as exc:
            logger.info("Log-in rejected: %s", exc.code)
            raise map_provider_error(exc) from exc
        self._set_user(user)
        return user

    def request_password_reset(self, email: str) -> str:
        """Ask the provider to send a reset link; delivery is not confirmed."""
        email = self._check_domain(email)
        auth = self._require_auth()
        try:
            auth.send_password_reset_email(email)
        except ProviderError as exc:
            raise map_provider_error(exc) from exc
        return RESET_SENT_MESSAGE

    def confirm_password_reset(self, token: str, new_password: str) -> None:
        """Set a new password from an emailed reset link."""
        auth = self._require_auth()
        try:
            auth.confirm_password_reset(token, new_password)
        except ProviderError as exc:
            logger.info("Password reset rejected: %s", exc.code)
            raise map_provider_error(exc) from exc

    def log_out(self) -> None:
        """Drop the verified session; an anonymous one takes its place."""
        self._set_user(None)
