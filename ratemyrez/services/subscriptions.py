"""Live query definitions and per-view subscription scoping."""

import hashlib
import logging
from collections.abc import Iterable

from pydantic import BaseModel

from ratemyrez.services.store import (
    QUESTIONS,
    REPLIES,
    REVIEWS,
    DocumentStore,
    ErrorCallback,
    LiveQuery,
    SnapshotCallback,
    Subscription,
)

logger = logging.getLogger(__name__)


def home_feed_query(limit: int) -> LiveQuery:
    """Most recent reviews across all properties."""
    return LiveQuery(REVIEWS, order_by="timestamp", descending=True, limit=limit)


def property_reviews_query(property_id: str) -> LiveQuery:
    """Reviews for one property; ordering happens in the aggregation layer."""
    return LiveQuery(REVIEWS, where=("property_id", property_id))


def property_questions_query(property_id: str) -> LiveQuery:
    return LiveQuery(
        QUESTIONS,
        where=("property_id", property_id),
        order_by="timestamp",
        descending=True,
    )


def question_replies_query(question_id: int) -> LiveQuery:
    return LiveQuery(REPLIES, where=("question_id", question_id), order_by="timestamp")


def snapshot_digest(records: Iterable[BaseModel]) -> str:
    """Fingerprint of a snapshot's contents, independent of display order."""
    digest = hashlib.sha256()
    for payload in sorted(record.model_dump_json() for record in records):
        digest.update(payload.encode())
    return digest.hexdigest()


class ViewSubscriptions:
    """At most one live subscription per (view, list kind).

    Acquiring with the same query keeps the running subscription; a different
    query tears the old one down before the new one starts.
    """

    def __init__(self, store: DocumentStore) -> None:
        self._store = store
        self._active: dict[tuple[str, str], Subscription] = {}

    def acquire(
        self,
        view: str,
        kind: str,
        query: LiveQuery,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        key = (view, kind)
        current = self._active.get(key)
        if current is not None and current.active and current.query == query:
            return current
        self.release(view, kind)
        logger.debug("Subscribing %s/%s to %s", view, kind, query)
        subscription = self._store.subscribe(query, on_snapshot, on_error)
        self._active[key] = subscription
        return subscription

    def get(self, view: str, kind: str) -> Subscription | None:
        subscription = self._active.get((view, kind))
        if subscription is not None and subscription.active:
            return subscription
        return None

    def release(self, view: str, kind: str | None = None) -> None:
        """Tear down one list's subscription, or every list of ``view``."""
        keys = [key for key in self._active if key[0] == view and (kind is None or key[1] == kind)]
        for key in keys:
            self._active.pop(key).unsubscribe()

    def release_all(self) -> None:
        for subscription in self._active.values():
            subscription.unsubscribe()
        self._active.clear()

    def __len__(self) -> int:
        return sum(1 for subscription in self._active.values() if subscription.active)
