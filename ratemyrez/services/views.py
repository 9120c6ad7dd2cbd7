"""Screen state and the live lists each screen shows.

``ViewState`` keeps exactly the subscriptions the visible screen needs.
Every navigation step reconciles them: lists that are still needed with the
same parameters keep running, the rest are torn down. Review statistics and
ordering are recomputed from the latest snapshot each time one arrives or
the sort mode changes.
"""

import logging
from enum import Enum

from ratemyrez.catalog import property_from_search
from ratemyrez.core.errors import SubscriptionError
from ratemyrez.models.enums import Category
from ratemyrez.schemas.property import Property
from ratemyrez.schemas.question import QuestionRecord, ReplyRecord
from ratemyrez.schemas.review import ReviewRecord
from ratemyrez.schemas.user import SessionUser
from ratemyrez.services.aggregation import (
    EMPTY_STATS,
    ReviewStats,
    SortMode,
    compute_stats,
    newest_first,
    sort_reviews,
)
from ratemyrez.services.session import SessionManager
from ratemyrez.services.subscriptions import (
    ViewSubscriptions,
    home_feed_query,
    property_questions_query,
    property_reviews_query,
    question_replies_query,
)

logger = logging.getLogger(__name__)

HOME_VIEW = "home"
PROPERTY_VIEW = "property"
REPLIES_VIEW = "replies"


class Screen(str, Enum):
    HOME = "HOME"
    LIST_ON = "LIST_ON"
    LIST_OFF = "LIST_OFF"
    PROPERTY = "PROPERTY"
    ABOUT = "ABOUT"
    CONTACT = "CONTACT"


class PropertyTab(str, Enum):
    REVIEWS = "REVIEWS"
    QA = "QA"

    @classmethod
    def parse(cls, value: str | None) -> "PropertyTab":
        return cls.QA if (value or "").upper() == "QA" else cls.REVIEWS


class ReplyThread:
    """Replies under one expanded question."""

    def __init__(self, question_id: int) -> None:
        self.question_id = question_id
        self.replies: list[ReplyRecord] = []
        self.loading = True
        self.error: str | None = None

    def on_snapshot(self, snapshot: list[ReplyRecord]) -> None:
        self.replies = list(snapshot)
        self.loading = False

    def on_error(self, exc: SubscriptionError) -> None:
        logger.warning("Reply fetch failed for question %s: %s", self.question_id, exc.message)
        self.error = exc.message
        self.loading = False


class ViewState:
    """Navigation state for one client plus the data its screen displays."""

    def __init__(
        self,
        session: SessionManager,
        subscriptions: ViewSubscriptions,
        feed_limit: int = 20,
    ) -> None:
        self.session = session
        self._subscriptions = subscriptions
        self._feed_limit = feed_limit

        self.screen = Screen.HOME
        self.category = Category.ON
        self.selected_property: Property | None = None
        self.tab = PropertyTab.REVIEWS
        self.sort_mode = SortMode.NEWEST

        self.home_feed: list[ReviewRecord] = []
        self.reviews: list[ReviewRecord] = []
        self.stats: ReviewStats = EMPTY_STATS
        self.questions: list[QuestionRecord] = []
        self.threads: dict[int, ReplyThread] = {}
        self.loading = False
        self.error: str | None = None

        self._review_snapshot: list[ReviewRecord] = []
        self._unlisten = session.on_change(self._on_session_change)
        self._sync()

    # -- context manager -----------------------------------------------------

    def __enter__(self) -> "ViewState":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    def close(self) -> None:
        """Tear down every subscription and stop following the session."""
        self._unlisten()
        self.threads.clear()
        self._subscriptions.release_all()

    # -- navigation ----------------------------------------------------------

    def navigate(self, screen: Screen) -> None:
        if screen == Screen.LIST_ON:
            self.category = Category.ON
        elif screen == Screen.LIST_OFF:
            self.category = Category.OFF
        self.screen = screen
        self._sync()

    def select_property(self, prop: Property) -> None:
        """Open a property page on its reviews tab."""
        if prop.category is not None:
            self.category = prop.category
        if self.selected_property is None or self.selected_property.id != prop.id:
            self._review_snapshot = []
            self.questions = []
            self._recompute()
        self.selected_property = prop
        self.screen = Screen.PROPERTY
        self.tab = PropertyTab.REVIEWS
        self._sync()

    def search(self, text: str) -> Property | None:
        """Open the property synthesized from a free-text address."""
        prop = property_from_search(text)
        if prop is not None:
            self.select_property(prop)
        return prop

    def set_tab(self, tab: PropertyTab) -> None:
        self.tab = tab
        self._sync()

    def set_sort(self, mode: SortMode) -> None:
        """Reorder the current snapshot; the live query itself is unchanged."""
        self.sort_mode = mode
        self._recompute()

    def back_to_list(self) -> None:
        self.navigate(Screen.LIST_ON if self.category == Category.ON else Screen.LIST_OFF)

    # -- reply threads -------------------------------------------------------

    def expand_replies(self, question_id: int) -> ReplyThread:
        thread = self.threads.get(question_id)
        if thread is None:
            thread = ReplyThread(question_id)
            self.threads[question_id] = thread
        self._subscriptions.acquire(
            REPLIES_VIEW,
            str(question_id),
            question_replies_query(question_id),
            thread.on_snapshot,
            thread.on_error,
        )
        return thread

    def collapse_replies(self, question_id: int) -> None:
        self.threads.pop(question_id, None)
        self._subscriptions.release(REPLIES_VIEW, str(question_id))

    def _collapse_all_replies(self) -> None:
        self.threads.clear()
        self._subscriptions.release(REPLIES_VIEW)

    # -- capability helpers --------------------------------------------------

    @property
    def user(self) -> SessionUser | None:
        return self.session.current_user

    @property
    def can_write(self) -> bool:
        return self.session.can_write

    def can_vote(self, review: ReviewRecord) -> bool:
        user = self.user
        return self.can_write and user is not None and not review.has_voted(user.uid)

    def can_edit(self, review: ReviewRecord) -> bool:
        user = self.user
        return self.can_write and user is not None and review.user_id == user.uid

    # -- subscription reconciliation ----------------------------------------

    def _sync(self) -> None:
        if self.session.current_user is None:
            self._subscriptions.release_all()
            return

        if self.screen == Screen.HOME:
            self.loading = True
            self._subscriptions.acquire(
                HOME_VIEW,
                "feed",
                home_feed_query(self._feed_limit),
                self._on_feed_snapshot,
                self._on_list_error,
            )
        else:
            self._subscriptions.release(HOME_VIEW)

        if self.screen != Screen.PROPERTY or self.selected_property is None:
            self._subscriptions.release(PROPERTY_VIEW)
            self._collapse_all_replies()
        else:
            self._sync_property(self.selected_property.id)
        # A kept subscription delivers nothing new, so nothing is pending
        self.loading = False

    def _sync_property(self, property_id: str) -> None:
        self.loading = True
        if self.tab == PropertyTab.REVIEWS:
            self._subscriptions.release(PROPERTY_VIEW, "questions")
            self._collapse_all_replies()
            self._subscriptions.acquire(
                PROPERTY_VIEW,
                "reviews",
                property_reviews_query(property_id),
                self._on_reviews_snapshot,
                self._on_list_error,
            )
        else:
            self._subscriptions.release(PROPERTY_VIEW, "reviews")
            subscription = self._subscriptions.get(PROPERTY_VIEW, "questions")
            if subscription is not None and subscription.query != property_questions_query(
                property_id
            ):
                self._collapse_all_replies()
            self._subscriptions.acquire(
                PROPERTY_VIEW,
                "questions",
                property_questions_query(property_id),
                self._on_questions_snapshot,
                self._on_list_error,
            )

    def _on_session_change(self, user: SessionUser | None) -> None:
        self._subscriptions.release_all()
        self.threads.clear()
        self._sync()

    # -- snapshot handlers ---------------------------------------------------

    def _recompute(self) -> None:
        self.reviews = sort_reviews(self._review_snapshot, self.sort_mode)
        self.stats = compute_stats(self._review_snapshot)

    def _on_feed_snapshot(self, snapshot: list[ReviewRecord]) -> None:
        self.home_feed = newest_first(snapshot, self._feed_limit)
        self.error = None
        self.loading = False

    def _on_reviews_snapshot(self, snapshot: list[ReviewRecord]) -> None:
        self._review_snapshot = list(snapshot)
        self._recompute()
        self.error = None
        self.loading = False

    def _on_questions_snapshot(self, snapshot: list[QuestionRecord]) -> None:
        self.questions = list(snapshot)
        self.error = None
        self.loading = False

    def _on_list_error(self, exc: SubscriptionError) -> None:
        logger.warning("List subscription failed: %s", exc.message)
        self.error = exc.message
        self.loading = False
