"""Review mutation commands."""

import logging

from ratemyrez.core.errors import (
    AuthenticationRequired,
    BackendUnavailable,
    NotReviewAuthor,
    RecordNotFound,
)
from ratemyrez.models.enums import Category
from ratemyrez.schemas.property import Property
from ratemyrez.schemas.review import ReviewForm, ReviewRecord
from ratemyrez.services.session import SessionManager
from ratemyrez.services.store import REVIEWS, SERVER_TIMESTAMP, DocumentStore

logger = logging.getLogger(__name__)


def create_review(
    session: SessionManager,
    store: DocumentStore | None,
    prop: Property,
    category: Category | None,
    form: ReviewForm,
) -> int:
    """
    Post a review for a property.

    The new record is not merged locally; it shows up in the next snapshot
    of any live query that matches it.

    Raises:
        BackendUnavailable: If the store is not connected
        AuthenticationRequired: If the session is anonymous

    """
    if store is None:
        raise BackendUnavailable()
    user = session.current_user
    if user is None or not session.can_write:
        raise AuthenticationRequired()

    fields = form.to_fields()
    fields.update(
        property_id=prop.id,
        property_name=prop.name,
        category=category.value if category else None,
        user_id=user.uid,
        user_email=user.email,
        helpful_count=0,
        timestamp=SERVER_TIMESTAMP,
    )
    review_id = store.create(REVIEWS, fields)
    logger.info("Review %s posted for %s by %s", review_id, prop.id, user.uid)
    return review_id


def get_review(store: DocumentStore | None, review_id: int) -> ReviewRecord:
    """Get a review by ID."""
    if store is None:
        raise BackendUnavailable()
    review = store.get(REVIEWS, review_id)
    if review is None:
        raise RecordNotFound(REVIEWS, review_id)
    return review


def update_review(
    session: SessionManager,
    store: DocumentStore | None,
    review_id: int,
    form: ReviewForm,
) -> None:
    """Replace every editable field of the author's own review."""
    if store is None:
        raise BackendUnavailable()
    user = session.current_user
    if user is None or not session.can_write:
        raise AuthenticationRequired()

    review = get_review(store, review_id)
    if review.user_id != user.uid:
        raise NotReviewAuthor()

    fields = form.to_fields()
    fields["last_edited"] = SERVER_TIMESTAMP
    store.update(REVIEWS, review_id, fields)
    logger.info("Review %s edited by %s", review_id, user.uid)


def cast_helpful_vote(
    session: SessionManager,
    store: DocumentStore | None,
    review_id: int,
) -> bool:
    """
    Mark a review as helpful once per voter.

    Returns True if the vote counted. Without a session or store, or when the
    voter already voted, nothing changes and False is returned. The dedup
    itself happens inside the store's single vote transaction.

    Raises:
        AuthenticationRequired: If the session is anonymous

    """
    user = session.current_user
    if store is None or user is None:
        return False
    if not session.can_write:
        raise AuthenticationRequired()
    return store.add_helpful_vote(review_id, user.uid)
