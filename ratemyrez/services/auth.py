"""Auth provider: anonymous and email/password accounts, bcrypt passwords, reset tokens.

The provider only knows about accounts. Which account a browser is signed in
as is tracked by the session manager.
"""

import hashlib
import logging
import secrets
import uuid
from collections.abc import Callable
from datetime import UTC, datetime, timedelta

import bcrypt
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import sessionmaker

from ratemyrez.models.account import Account, PasswordResetToken
from ratemyrez.schemas.user import SessionUser
from ratemyrez.services.email import send_password_reset_email

logger = logging.getLogger(__name__)

# bcrypt only looks at the first 72 bytes
_BCRYPT_MAX_BYTES = 72


class ProviderError(Exception):
    """Error raised by the provider, identified by a stable ``code``."""

    def __init__(self, code: str, message: str) -> None:
        self.code = code
        self.message = message
        super().__init__(f"{message} ({code})")


def get_password_hash(plain: str) -> str:
    return bcrypt.hashpw(plain.encode("utf-8")[:_BCRYPT_MAX_BYTES], bcrypt.gensalt()).decode(
        "utf-8"
    )


def verify_password(plain: str, hashed: str) -> bool:
    return bcrypt.checkpw(plain.encode("utf-8")[:_BCRYPT_MAX_BYTES], hashed.encode("utf-8"))


def _hash_token(token: str) -> str:
    """SHA-256 hash of a reset token for DB storage."""
    return hashlib.sha256(token.encode("utf-8")).hexdigest()


def _normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthProvider:
    """Account operations backed by the ``accounts`` table."""

    def __init__(
        self,
        session_factory: sessionmaker,
        password_min_length: int = 6,
        reset_token_ttl: timedelta = timedelta(hours=1),
        mailer: Callable[[str, str], bool] = send_password_reset_email,
    ) -> None:
        self._session_factory = session_factory
        self._password_min_length = password_min_length
        self._reset_token_ttl = reset_token_ttl
        self._mailer = mailer

    def _check_password(self, password: str) -> None:
        if len(password) < self._password_min_length:
            raise ProviderError(
                "auth/weak-password",
                f"Password should be at least {self._password_min_length} characters.",
            )

    def sign_in_anonymously(self) -> SessionUser:
        account = Account(uid=uuid.uuid4().hex, is_anonymous=True)
        with self._session_factory() as db:
            db.add(account)
            db.commit()
            db.refresh(account)
            logger.debug("Created anonymous account %s", account.uid)
            return SessionUser.model_validate(account)

    def get_user(self, uid: str) -> SessionUser | None:
        with self._session_factory() as db:
            account = db.get(Account, uid)
            return SessionUser.model_validate(account) if account else None

    def get_user_by_email(self, email: str) -> SessionUser | None:
        with self._session_factory() as db:
            account = db.execute(
                select(Account).where(Account.email == _normalize_email(email))
            ).scalar_one_or_none()
            return SessionUser.model_validate(account) if account else None

    def create_user_with_email_and_password(self, email: str, password: str) -> SessionUser:
        """Create a verified account; the caller becomes signed in as it."""
        email = _normalize_email(email)
        if "@" not in email:
            raise ProviderError("auth/invalid-email", "The email address is badly formatted.")
        self._check_password(password)

        account = Account(
            uid=uuid.uuid4().hex,
            email=email,
            hashed_password=get_password_hash(password),
            is_anonymous=False,
        )
        with self._session_factory() as db:
            db.add(account)
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                raise ProviderError(
                    "auth/email-already-in-use",
                    "The email address is already in use by another account.",
                ) from None
            db.refresh(account)
            logger.info("Created account %s", account.uid)
            return SessionUser.model_validate(account)

    def sign_in_with_email_and_password(self, email: str, password: str) -> SessionUser:
        with self._session_factory() as db:
            account = db.execute(
                select(Account).where(Account.email == _normalize_email(email))
            ).scalar_one_or_none()
            if (
                account is None
                or account.hashed_password is None
                or not verify_password(password, account.hashed_password)
            ):
                raise ProviderError(
                    "auth/invalid-credential", "The supplied auth credential is incorrect."
                )
            return SessionUser.model_validate(account)

    def send_password_reset_email(self, email: str) -> None:
        """Issue a reset token and mail it.

        Unknown addresses are accepted silently so the caller cannot tell
        whether an account exists.
        """
        with self._session_factory() as db:
            account = db.execute(
                select(Account).where(Account.email == _normalize_email(email))
            ).scalar_one_or_none()
            if account is None:
                logger.info("Password reset requested for unknown address")
                return
            token = secrets.token_urlsafe(32)
            db.add(
                PasswordResetToken(
                    uid=account.uid,
                    token_hash=_hash_token(token),
                    expires_at=datetime.now(UTC) + self._reset_token_ttl,
                )
            )
            db.commit()
            recipient = account.email
        if not self._mailer(recipient, token):
            logger.warning("Password reset email for %s was not delivered", recipient)

    def confirm_password_reset(self, token: str, new_password: str) -> None:
        """Set a new password using a reset token; each token works once."""
        self._check_password(new_password)
        with self._session_factory() as db:
            reset = db.execute(
                select(PasswordResetToken).where(
                    PasswordResetToken.token_hash == _hash_token(token)
                )
            ).scalar_one_or_none()
            if reset is None or reset.used or _as_utc(reset.expires_at) <= datetime.now(UTC):
                raise ProviderError(
                    "auth/invalid-action-code", "The action code is invalid or has expired."
                )
            account = db.get(Account, reset.uid)
            account.hashed_password = get_password_hash(new_password)
            reset.used = True
            db.commit()
            logger.info("Password reset for %s", account.uid)


def _as_utc(value: datetime) -> datetime:
    # SQLite hands datetimes back without tzinfo
    return value if value.tzinfo else value.replace(tzinfo=UTC)
