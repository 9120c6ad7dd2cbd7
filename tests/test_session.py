"""Tests for the auth provider and the session manager."""

from datetime import timedelta

import pytest

from ratemyrez.core.errors import (
    AccountAlreadyExists,
    AuthError,
    BackendUnavailable,
    DomainRejected,
    InvalidCredential,
    InvalidResetToken,
)
from ratemyrez.services.auth import (
    AuthProvider,
    ProviderError,
    get_password_hash,
    verify_password,
)
from ratemyrez.services.session import (
    RESET_SENT_MESSAGE,
    SESSION_UID_KEY,
    SessionManager,
    map_provider_error,
)

# =============================================================================
# Unit Tests: Password Hashing
# =============================================================================


class TestPasswordHashing:
    """Tests for password hashing functions."""

    def test_get_password_hash_returns_bcrypt_format(self):
        """Test that hash is in bcrypt format."""
        hashed = get_password_hash("password123")
        # bcrypt hashes start with $2b$ or $2a$
        assert hashed.startswith("$2")

    def test_get_password_hash_different_for_same_input(self):
        """Test that same password produces different hashes (due to salt)."""
        assert get_password_hash("password123") != get_password_hash("password123")

    def test_verify_password_correct(self):
        hashed = get_password_hash("mysecretpassword")
        assert verify_password("mysecretpassword", hashed) is True

    def test_verify_password_incorrect(self):
        hashed = get_password_hash("correctpassword")
        assert verify_password("wrongpassword", hashed) is False


# =============================================================================
# Unit Tests: Auth Provider
# =============================================================================


class TestAuthProvider:
    """Tests for AuthProvider account operations."""

    def test_sign_in_anonymously(self, auth):
        user = auth.sign_in_anonymously()
        assert user.is_anonymous is True
        assert user.email is None
        assert auth.get_user(user.uid) == user

    def test_create_user_lowercases_email(self, auth):
        user = auth.create_user_with_email_and_password("Alice@UWaterloo.ca", "secret1")
        assert user.email == "alice@uwaterloo.ca"
        assert user.is_anonymous is False

    def test_create_user_duplicate_email(self, auth):
        auth.create_user_with_email_and_password("alice@uwaterloo.ca", "secret1")
        with pytest.raises(ProviderError) as exc_info:
            auth.create_user_with_email_and_password("alice@uwaterloo.ca", "secret2")
        assert exc_info.value.code == "auth/email-already-in-use"

    def test_create_user_weak_password(self, auth):
        with pytest.raises(ProviderError) as exc_info:
            auth.create_user_with_email_and_password("alice@uwaterloo.ca", "123")
        assert exc_info.value.code == "auth/weak-password"

    def test_sign_in_wrong_password(self, auth):
        auth.create_user_with_email_and_password("alice@uwaterloo.ca", "secret1")
        with pytest.raises(ProviderError) as exc_info:
            auth.sign_in_with_email_and_password("alice@uwaterloo.ca", "nope")
        assert exc_info.value.code == "auth/invalid-credential"

    def test_sign_in_unknown_email(self, auth):
        with pytest.raises(ProviderError) as exc_info:
            auth.sign_in_with_email_and_password("ghost@uwaterloo.ca", "secret1")
        assert exc_info.value.code == "auth/invalid-credential"

    def test_reset_unknown_email_is_silent(self, auth, sent_emails):
        auth.send_password_reset_email("ghost@uwaterloo.ca")
        assert sent_emails == []

    def test_reset_flow(self, auth, sent_emails):
        auth.create_user_with_email_and_password("alice@uwaterloo.ca", "secret1")
        auth.send_password_reset_email("alice@uwaterloo.ca")
        assert len(sent_emails) == 1
        email, token = sent_emails[0]
        assert email == "alice@uwaterloo.ca"

        auth.confirm_password_reset(token, "newsecret")
        assert auth.sign_in_with_email_and_password("alice@uwaterloo.ca", "newsecret")

    def test_reset_token_single_use(self, auth, sent_emails):
        auth.create_user_with_email_and_password("alice@uwaterloo.ca", "secret1")
        auth.send_password_reset_email("alice@uwaterloo.ca")
        _, token = sent_emails[0]
        auth.confirm_password_reset(token, "newsecret")
        with pytest.raises(ProviderError) as exc_info:
            auth.confirm_password_reset(token, "another1")
        assert exc_info.value.code == "auth/invalid-action-code"

    def test_reset_token_expires(self, context, sent_emails):
        expired = AuthProvider(
            context.auth._session_factory,
            reset_token_ttl=timedelta(seconds=-1),
            mailer=lambda email, token: sent_emails.append((email, token)) or True,
        )
        expired.create_user_with_email_and_password("alice@uwaterloo.ca", "secret1")
        expired.send_password_reset_email("alice@uwaterloo.ca")
        _, token = sent_emails[0]
        with pytest.raises(ProviderError):
            expired.confirm_password_reset(token, "newsecret")


# =============================================================================
# Unit Tests: Session Manager
# =============================================================================


class TestMapProviderError:
    """Tests for provider error mapping."""

    def test_invalid_credential(self):
        error = map_provider_error(ProviderError("auth/invalid-credential", "raw"))
        assert isinstance(error, InvalidCredential)
        assert error.message == "Incorrect email or password."

    def test_email_in_use(self):
        error = map_provider_error(ProviderError("auth/email-already-in-use", "raw"))
        assert isinstance(error, AccountAlreadyExists)
        assert error.message == "This email is already registered."

    def test_invalid_action_code(self):
        error = map_provider_error(ProviderError("auth/invalid-action-code", "raw"))
        assert isinstance(error, InvalidResetToken)

    def test_other_codes_keep_raw_message(self):
        error = map_provider_error(ProviderError("auth/weak-password", "Too short."))
        assert type(error) is AuthError
        assert error.message == "Too short."


class TestSessionManager:
    """Tests for SessionManager."""

    def test_new_session_is_anonymous(self, guest_session):
        user = guest_session.current_user
        assert user is not None
        assert user.is_anonymous is True
        assert guest_session.can_write is False

    def test_session_restored_from_storage(self, make_session):
        storage = {}
        first = make_session(storage)
        second = make_session(storage)
        assert second.current_user == first.current_user

    def test_sign_up_with_school_email(self, guest_session):
        user = guest_session.sign_up("alice@uwaterloo.ca", "password123")
        assert guest_session.current_user == user
        assert guest_session.can_write is True

    def test_sign_up_rejects_other_domain(self, guest_session, auth):
        """Non-school emails are rejected before any account is created."""
        with pytest.raises(DomainRejected) as exc_info:
            guest_session.sign_up("alice@gmail.com", "password123")
        assert exc_info.value.message == "Access Denied: You must use a @uwaterloo.ca email."
        assert auth.get_user_by_email("alice@gmail.com") is None
        assert guest_session.current_user.is_anonymous

    def test_sign_up_duplicate(self, make_session):
        make_session().sign_up("alice@uwaterloo.ca", "password123")
        with pytest.raises(AccountAlreadyExists):
            make_session().sign_up("alice@uwaterloo.ca", "password123")

    def test_log_in(self, make_session):
        make_session().sign_up("alice@uwaterloo.ca", "password123")
        session = make_session()
        session.log_in("alice@uwaterloo.ca", "password123")
        assert session.current_user.email == "alice@uwaterloo.ca"

    def test_log_in_wrong_password(self, make_session):
        make_session().sign_up("alice@uwaterloo.ca", "password123")
        with pytest.raises(InvalidCredential):
            make_session().log_in("alice@uwaterloo.ca", "wrong-password")

    def test_log_in_rejects_other_domain(self, guest_session):
        with pytest.raises(DomainRejected):
            guest_session.log_in("alice@gmail.com", "password123")

    def test_log_out_falls_back_to_anonymous(self, student_session):
        verified_uid = student_session.current_user.uid
        changes = []
        student_session.on_change(changes.append)

        student_session.log_out()

        user = student_session.current_user
        assert user.is_anonymous is True
        assert user.uid != verified_uid
        # Cleared, then replaced by the new anonymous session
        assert changes[0] is None
        assert changes[-1] == user

    def test_on_change_unregister(self, guest_session):
        changes = []
        remove = guest_session.on_change(changes.append)
        remove()
        guest_session.sign_up("alice@uwaterloo.ca", "password123")
        assert changes == []

    def test_session_uid_written_to_storage(self, make_session):
        storage = {}
        session = make_session(storage)
        session.sign_up("alice@uwaterloo.ca", "password123")
        assert storage[SESSION_UID_KEY] == session.current_user.uid

    def test_request_password_reset(self, student_session, sent_emails):
        assert student_session.request_password_reset("alice@uwaterloo.ca") == RESET_SENT_MESSAGE
        assert len(sent_emails) == 1

    def test_confirm_password_reset_bad_token(self, guest_session):
        with pytest.raises(InvalidResetToken):
            guest_session.confirm_password_reset("not-a-token", "password123")

    def test_no_backend(self):
        session = SessionManager(None, {}, "@uwaterloo.ca")
        assert session.current_user is None
        with pytest.raises(BackendUnavailable):
            session.sign_up("alice@uwaterloo.ca", "password123")
