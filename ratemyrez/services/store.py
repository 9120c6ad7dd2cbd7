"""Document store with live queries.

Records live in three collections (``reviews``, ``questions``, ``replies``),
all scoped under one ``app_id``. A live query subscription receives the full
result set when it is established and again after every committed write to
its collection. Snapshots are authoritative: consumers replace their state
with each one.
"""

import logging
import threading
from collections.abc import Callable
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import Any

from pydantic import BaseModel
from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import selectinload, sessionmaker

from ratemyrez.core.errors import RecordNotFound, SubscriptionError
from ratemyrez.models.question import Question, Reply
from ratemyrez.models.review import Review, ReviewVote
from ratemyrez.schemas.question import QuestionRecord, ReplyRecord
from ratemyrez.schemas.review import ReviewRecord

logger = logging.getLogger(__name__)

REVIEWS = "reviews"
QUESTIONS = "questions"
REPLIES = "replies"

_COLLECTIONS: dict[str, tuple[type, type[BaseModel]]] = {
    REVIEWS: (Review, ReviewRecord),
    QUESTIONS: (Question, QuestionRecord),
    REPLIES: (Reply, ReplyRecord),
}


class _ServerTimestamp:
    def __repr__(self) -> str:
        return "SERVER_TIMESTAMP"


# Placeholder replaced with the store clock when a write is applied
SERVER_TIMESTAMP = _ServerTimestamp()


@dataclass(frozen=True)
class LiveQuery:
    """Filter, order and limit over one collection.

    Without ``order_by`` results come back in insertion order.
    """

    collection: str
    where: tuple[str, Any] | None = None
    order_by: str | None = None
    descending: bool = False
    limit: int | None = None


SnapshotCallback = Callable[[list[Any]], None]
ErrorCallback = Callable[[SubscriptionError], None]


class Subscription:
    """Handle for one live query; ``unsubscribe`` stops all further delivery."""

    def __init__(
        self,
        store: "DocumentStore",
        query: LiveQuery,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> None:
        self.query = query
        self._store = store
        self._on_snapshot = on_snapshot
        self._on_error = on_error
        self._active = True

    @property
    def active(self) -> bool:
        return self._active

    def deliver(self, snapshot: list[Any]) -> None:
        # A snapshot racing a teardown is dropped
        if self._active:
            self._on_snapshot(snapshot)

    def fail(self, error: SubscriptionError) -> None:
        if not self._active:
            return
        self.unsubscribe()
        if self._on_error is not None:
            self._on_error(error)

    def unsubscribe(self) -> None:
        if self._active:
            self._active = False
            self._store._remove(self)


class DocumentStore:
    """SQL-backed document store scoped to one application id."""

    def __init__(self, session_factory: sessionmaker, app_id: str) -> None:
        self.app_id = app_id
        self._session_factory = session_factory
        self._subscriptions: list[Subscription] = []
        self._lock = threading.RLock()
        # SQLite allows a single writer; writes are serialized in-process
        self._write_lock = threading.Lock()
        # Held across query and delivery; snapshots reach subscribers in store order
        self._publish_lock = threading.RLock()
        self._last_timestamp: datetime | None = None

    # -- clock ---------------------------------------------------------------

    def server_timestamp(self) -> datetime:
        """Strictly increasing UTC timestamp."""
        with self._lock:
            now = datetime.now(UTC)
            if self._last_timestamp is not None and now <= self._last_timestamp:
                now = self._last_timestamp + timedelta(microseconds=1)
            self._last_timestamp = now
            return now

    def _resolve(self, fields: dict[str, Any]) -> dict[str, Any]:
        return {
            key: self.server_timestamp() if value is SERVER_TIMESTAMP else value
            for key, value in fields.items()
        }

    # -- reads ---------------------------------------------------------------

    def _model(self, collection: str) -> tuple[type, type[BaseModel]]:
        try:
            return _COLLECTIONS[collection]
        except KeyError:
            raise SubscriptionError(f"Unknown collection '{collection}'.") from None

    def _column(self, model: type, field: str) -> Any:
        column = getattr(model, field, None)
        if column is None or not hasattr(column, "property"):
            raise SubscriptionError(f"Unknown field '{field}' on {model.__tablename__}.")
        return column

    def run_query(self, query: LiveQuery) -> list[Any]:
        """Evaluate a query once and return its records."""
        model, record_type = self._model(query.collection)
        stmt = select(model).where(model.app_id == self.app_id)
        if query.where is not None:
            field, value = query.where
            stmt = stmt.where(self._column(model, field) == value)
        if query.order_by is not None:
            column = self._column(model, query.order_by)
            stmt = stmt.order_by(
                column.desc() if query.descending else column.asc(),
                model.id.desc() if query.descending else model.id.asc(),
            )
        else:
            stmt = stmt.order_by(model.id.asc())
        if query.limit is not None:
            stmt = stmt.limit(query.limit)
        if model is Review:
            stmt = stmt.options(selectinload(Review.votes))

        with self._session_factory() as db:
            rows = db.execute(stmt).scalars().all()
            return [record_type.model_validate(row) for row in rows]

    def get(self, collection: str, record_id: int) -> Any | None:
        """Fetch one record by id, or None."""
        model, record_type = self._model(collection)
        with self._session_factory() as db:
            row = db.get(model, record_id)
            if row is None or row.app_id != self.app_id:
                return None
            return record_type.model_validate(row)

    # -- writes --------------------------------------------------------------

    def create(self, collection: str, fields: dict[str, Any]) -> int:
        """Insert a record and return its store-assigned id."""
        model, _ = self._model(collection)
        with self._write_lock, self._session_factory() as db:
            row = model(app_id=self.app_id, **self._resolve(fields))
            db.add(row)
            db.commit()
            record_id = row.id
        logger.info("Created %s/%s in %s", collection, record_id, self.app_id)
        self._publish(collection)
        return record_id

    def update(self, collection: str, record_id: int, fields: dict[str, Any]) -> None:
        """Replace the given fields of an existing record."""
        model, _ = self._model(collection)
        with self._write_lock, self._session_factory() as db:
            row = db.get(model, record_id)
            if row is None or row.app_id != self.app_id:
                raise RecordNotFound(collection, record_id)
            for field, value in self._resolve(fields).items():
                setattr(row, field, value)
            db.commit()
        logger.info("Updated %s/%s", collection, record_id)
        self._publish(collection)

    def add_helpful_vote(self, review_id: int, voter_uid: str) -> bool:
        """Append ``voter_uid`` to the review's voters and bump ``helpful_count``.

        Both changes commit in one transaction. A voter already present hits
        the unique constraint, the increment rolls back with it, and the call
        returns False.
        """
        with self._write_lock, self._session_factory() as db:
            result = db.execute(
                update(Review)
                .where(Review.id == review_id, Review.app_id == self.app_id)
                .values(helpful_count=Review.helpful_count + 1)
            )
            if result.rowcount == 0:
                raise RecordNotFound(REVIEWS, review_id)
            db.add(ReviewVote(review_id=review_id, voter_uid=voter_uid))
            try:
                db.commit()
            except IntegrityError:
                db.rollback()
                logger.debug("Duplicate helpful vote by %s on review %s", voter_uid, review_id)
                return False
        self._publish(REVIEWS)
        return True

    # -- live queries --------------------------------------------------------

    def subscribe(
        self,
        query: LiveQuery,
        on_snapshot: SnapshotCallback,
        on_error: ErrorCallback | None = None,
    ) -> Subscription:
        """Start a live query; the first snapshot is delivered before returning."""
        subscription = Subscription(self, query, on_snapshot, on_error)
        with self._lock:
            self._subscriptions.append(subscription)
        self._deliver(subscription)
        return subscription

    def _remove(self, subscription: Subscription) -> None:
        with self._lock:
            if subscription in self._subscriptions:
                self._subscriptions.remove(subscription)

    def _deliver(self, subscription: Subscription) -> None:
        with self._publish_lock:
            try:
                snapshot = self.run_query(subscription.query)
            except SubscriptionError as exc:
                logger.warning("Live query %s failed: %s", subscription.query, exc.message)
                subscription.fail(exc)
                return
            except SQLAlchemyError:
                logger.exception("Live query %s failed", subscription.query)
                subscription.fail(SubscriptionError())
                return
            subscription.deliver(snapshot)

    def _publish(self, collection: str) -> None:
        with self._lock:
            targets = [s for s in self._subscriptions if s.query.collection == collection]
        for subscription in targets:
            self._deliver(subscription)

    @property
    def subscription_count(self) -> int:
        with self._lock:
            return len(self._subscriptions)

    def close(self) -> None:
        """Tear down every live query."""
        with self._lock:
            subscriptions = list(self._subscriptions)
        for subscription in subscriptions:
            subscription.unsubscribe()
