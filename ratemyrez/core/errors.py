"""Error taxonomy shared by the services, the web pages and the JSON API.

Every error carries a ``message`` that is safe to show to the user as-is.
"""


class RezError(Exception):
    """Base class for application errors."""

    message = "Something went wrong."

    def __init__(self, message: str | None = None) -> None:
        if message is not None:
            self.message = message
        super().__init__(self.message)


class DomainRejected(RezError):
    """Email does not end with the allow-listed university suffix."""

    def __init__(self, domain: str) -> None:
        self.domain = domain
        super().__init__(f"Access Denied: You must use a {domain} email.")


class AuthError(RezError):
    """Auth provider rejected a request; ``message`` is the raw provider text."""


class InvalidCredential(AuthError):
    message = "Incorrect email or password."


class AccountAlreadyExists(AuthError):
    message = "This email is already registered."


class AuthenticationRequired(RezError):
    """The action needs a verified (non-anonymous) account."""

    message = "Please log in with your school email to continue."


class BackendUnavailable(RezError):
    """Store or auth provider is not initialized yet."""

    message = "Database not connected yet!"


class SubscriptionError(RezError):
    """A live query could not be evaluated."""

    message = "Could not load the latest data."


class RecordNotFound(RezError):
    def __init__(self, collection: str, record_id: int) -> None:
        self.collection = collection
        self.record_id = record_id
        super().__init__(f"No {collection} record with id {record_id}.")


class NotReviewAuthor(RezError):
    message = "You can only edit your own reviews."


class InvalidImage(RezError):
    message = "That file could not be read as an image."


class InvalidResetToken(RezError):
    message = "This reset link is invalid or has expired."
