"""Community Q&A mutation commands."""

import logging

from ratemyrez.core.errors import BackendUnavailable
from ratemyrez.schemas.property import Property
from ratemyrez.services.session import SessionManager
from ratemyrez.services.store import QUESTIONS, REPLIES, SERVER_TIMESTAMP, DocumentStore

logger = logging.getLogger(__name__)

WAIT_FOR_CONNECTION = "Please wait for connection..."


def create_question(
    session: SessionManager,
    store: DocumentStore | None,
    prop: Property,
    text: str,
) -> int | None:
    """Ask a question about a property. Anonymous sessions may ask.

    Blank text is ignored and returns None.
    """
    user = session.current_user
    if store is None or user is None:
        raise BackendUnavailable(WAIT_FOR_CONNECTION)
    if not text.strip():
        return None

    question_id = store.create(
        QUESTIONS,
        {
            "property_id": prop.id,
            "property_name": prop.name,
            "user_id": user.uid,
            "text": text,
            "reply_count": 0,
            "timestamp": SERVER_TIMESTAMP,
        },
    )
    logger.info("Question %s asked about %s", question_id, prop.id)
    return question_id


def create_reply(
    session: SessionManager,
    store: DocumentStore | None,
    question_id: int,
    text: str,
) -> int | None:
    """Answer a question; does nothing for blank text or a missing session."""
    user = session.current_user
    if not text.strip() or store is None or user is None:
        return None
    return store.create(
        REPLIES,
        {
            "question_id": question_id,
            "text": text,
            "user_id": user.uid,
            "timestamp": SERVER_TIMESTAMP,
        },
    )
