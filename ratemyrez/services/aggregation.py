"""Review statistics and sort policy.

Everything here is a pure function of the review snapshot it is given: no
running totals are kept between snapshots and the input list is never
reordered in place.
"""

from collections.abc import Sequence
from dataclasses import dataclass
from datetime import UTC
from decimal import ROUND_HALF_UP, Decimal
from enum import Enum

from ratemyrez.schemas.review import ReviewRecord

# Sort key used for a review that gives no rent, so it lands after every priced one
UNSET_RENT_SORT_VALUE = 9999


class SortMode(str, Enum):
    """Review ordering chosen on the property page."""

    NEWEST = "NEWEST"
    RENT_LOW = "RENT_LOW"
    LOCATION_BEST = "LOCATION_BEST"
    MOST_HELPFUL = "MOST_HELPFUL"

    @property
    def label(self) -> str:
        return _SORT_LABELS[self]

    @classmethod
    def parse(cls, value: str | None) -> "SortMode":
        """Sort mode for a query-string value; unknown values mean NEWEST."""
        try:
            return cls((value or "").upper())
        except ValueError:
            return cls.NEWEST


_SORT_LABELS = {
    SortMode.NEWEST: "Newest First",
    SortMode.RENT_LOW: "Lowest Rent",
    SortMode.LOCATION_BEST: "Best Location",
    SortMode.MOST_HELPFUL: "Most Helpful",
}


@dataclass(frozen=True)
class ReviewStats:
    avg_rating: float
    avg_rent: int
    avg_dist: int
    count: int


EMPTY_STATS = ReviewStats(avg_rating=0, avg_rent=0, avg_dist=0, count=0)


def _round_half_up(total: Decimal, count: int, places: str) -> Decimal:
    return (total / Decimal(count)).quantize(Decimal(places), rounding=ROUND_HALF_UP)


def compute_stats(reviews: Sequence[ReviewRecord]) -> ReviewStats:
    """
    Compute display statistics for a property's review snapshot.

    - avg_rating: mean star rating to one decimal place, 0 when empty
    - avg_rent: mean over reviews with rent > 0, nearest whole number
    - avg_dist: mean over reviews with distance > 0, nearest whole number

    Rent and distance are truncated to whole units before averaging.
    """
    if not reviews:
        return EMPTY_STATS

    rating_total = sum((Decimal(r.rating) for r in reviews), Decimal(0))
    rents = [int(r.rent) for r in reviews if r.rent is not None and r.rent > 0]
    distances = [int(r.distance) for r in reviews if r.distance is not None and r.distance > 0]

    return ReviewStats(
        avg_rating=float(_round_half_up(rating_total, len(reviews), "0.1")),
        avg_rent=int(_round_half_up(Decimal(sum(rents)), len(rents), "1")) if rents else 0,
        avg_dist=(
            int(_round_half_up(Decimal(sum(distances)), len(distances), "1")) if distances else 0
        ),
        count=len(reviews),
    )


def _created_at(review: ReviewRecord) -> float:
    """Creation time in epoch seconds; a review not yet stamped counts as 0."""
    if review.timestamp is None:
        return 0.0
    ts = review.timestamp
    if ts.tzinfo is None:
        ts = ts.replace(tzinfo=UTC)
    return ts.timestamp()


def _rent_key(review: ReviewRecord) -> float:
    return review.rent if review.rent else UNSET_RENT_SORT_VALUE


def sort_reviews(reviews: Sequence[ReviewRecord], mode: SortMode) -> list[ReviewRecord]:
    """Return a new list ordered by ``mode``; ties keep snapshot order."""
    if mode == SortMode.RENT_LOW:
        return sorted(reviews, key=_rent_key)
    if mode == SortMode.LOCATION_BEST:
        return sorted(reviews, key=lambda r: r.location_rating or 0, reverse=True)
    if mode == SortMode.MOST_HELPFUL:
        return sorted(reviews, key=lambda r: r.helpful_count or 0, reverse=True)
    return sorted(reviews, key=_created_at, reverse=True)


def newest_first(reviews: Sequence[ReviewRecord], limit: int | None = None) -> list[ReviewRecord]:
    """Home feed ordering."""
    ordered = sort_reviews(reviews, SortMode.NEWEST)
    return ordered if limit is None else ordered[:limit]
