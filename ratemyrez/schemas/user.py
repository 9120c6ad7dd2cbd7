"""Session user schema."""

from pydantic import BaseModel


class SessionUser(BaseModel):
    """Identity of the active session.

    Anonymous sessions have a uid but no email.
    """

    uid: str
    email: str | None = None
    is_anonymous: bool = True

    model_config = {"from_attributes": True, "frozen": True}
