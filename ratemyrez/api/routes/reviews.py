"""Review API routes."""

from fastapi import APIRouter, Depends

from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.schemas.review import ReviewRecord
from ratemyrez.services import reviews as review_service
from ratemyrez.services.aggregation import newest_first
from ratemyrez.services.subscriptions import home_feed_query

router = APIRouter(prefix="/reviews", tags=["reviews"])


@router.get("/recent", response_model=list[ReviewRecord])
def recent_reviews(context: AppContext = Depends(get_app_context)) -> list[ReviewRecord]:
    """The home feed: most recent reviews across every property."""
    limit = context.settings.HOME_FEED_LIMIT
    return newest_first(context.require_store().run_query(home_feed_query(limit)), limit)


@router.get("/{review_id}", response_model=ReviewRecord)
def get_review(
    review_id: int,
    context: AppContext = Depends(get_app_context),
) -> ReviewRecord:
    """Get a review by ID."""
    return review_service.get_review(context.require_store(), review_id)
