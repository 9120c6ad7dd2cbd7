"""Property API routes."""

from fastapi import APIRouter, Depends

from ratemyrez.catalog import ON_CAMPUS_DORMS, POPULAR_OFF_CAMPUS, properties_for, resolve_property
from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.models.enums import Category
from ratemyrez.schemas.property import Property
from ratemyrez.schemas.question import QuestionRecord
from ratemyrez.schemas.review import PropertyDetailResponse, ReviewStatsResponse
from ratemyrez.services.aggregation import SortMode, compute_stats, sort_reviews
from ratemyrez.services.subscriptions import property_questions_query, property_reviews_query

router = APIRouter(prefix="/properties", tags=["properties"])


@router.get("", response_model=list[Property])
def list_properties(category: Category | None = None) -> list[Property]:
    """List catalog properties, optionally for one category."""
    if category is None:
        return ON_CAMPUS_DORMS + POPULAR_OFF_CAMPUS
    return properties_for(category)


@router.get("/{property_id}", response_model=PropertyDetailResponse)
def get_property(
    property_id: str,
    name: str | None = None,
    sort: str | None = None,
    context: AppContext = Depends(get_app_context),
) -> PropertyDetailResponse:
    """Get a property with its review stats and sorted reviews."""
    prop = resolve_property(property_id, name)
    store = context.require_store()
    snapshot = store.run_query(property_reviews_query(prop.id))
    mode = SortMode.parse(sort)
    stats = compute_stats(snapshot)
    return PropertyDetailResponse(
        property=prop,
        sort=mode.value,
        stats=ReviewStatsResponse(
            avg_rating=stats.avg_rating,
            avg_rent=stats.avg_rent,
            avg_dist=stats.avg_dist,
            count=stats.count,
        ),
        reviews=sort_reviews(snapshot, mode),
    )


@router.get("/{property_id}/questions", response_model=list[QuestionRecord])
def list_questions(
    property_id: str,
    context: AppContext = Depends(get_app_context),
) -> list[QuestionRecord]:
    """List a property's questions, newest first."""
    return context.require_store().run_query(property_questions_query(property_id))
