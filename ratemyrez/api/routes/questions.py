"""Question API routes."""

from fastapi import APIRouter, Depends

from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.schemas.question import ReplyRecord
from ratemyrez.services.subscriptions import question_replies_query

router = APIRouter(prefix="/questions", tags=["questions"])


@router.get("/{question_id}/replies", response_model=list[ReplyRecord])
def list_replies(
    question_id: int,
    context: AppContext = Depends(get_app_context),
) -> list[ReplyRecord]:
    """List replies to a question in the order they were posted."""
    return context.require_store().run_query(question_replies_query(question_id))
