"""Community Q&A web routes."""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import RedirectResponse

from ratemyrez.catalog import resolve_property
from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.core.errors import RezError
from ratemyrez.services import questions as question_service
from ratemyrez.services.session import SessionManager
from ratemyrez.services.store import QUESTIONS
from ratemyrez.web.dependencies import add_flash_message, back_to, get_session_manager
from ratemyrez.web.template_config import property_path

router = APIRouter()


@router.post("/properties/{property_id}/questions")
async def ask_question(
    request: Request,
    property_id: str,
    text: str = Form(""),
    name: str | None = Form(None),
    context: AppContext = Depends(get_app_context),
    session: SessionManager = Depends(get_session_manager),
) -> RedirectResponse:
    """Post a question to a property's Q&A tab."""
    prop = resolve_property(property_id, name)
    try:
        question_service.create_question(
            session, context.store if context.ready else None, prop, text
        )
    except RezError as exc:
        add_flash_message(request, exc.message, "error")
    return RedirectResponse(property_path(prop, tab="qa"), status_code=303)


@router.post("/questions/{question_id}/replies")
async def reply_to_question(
    request: Request,
    question_id: int,
    text: str = Form(""),
    context: AppContext = Depends(get_app_context),
    session: SessionManager = Depends(get_session_manager),
) -> RedirectResponse:
    """Post a reply and come back with the thread expanded."""
    store = context.store if context.ready else None
    question_service.create_reply(session, store, question_id, text)

    question = store.get(QUESTIONS, question_id) if store is not None else None
    if question is None:
        return RedirectResponse(back_to(request, "/"), status_code=303)
    prop = resolve_property(question.property_id, question.property_name)
    return RedirectResponse(property_path(prop, tab="qa", expand=question_id), status_code=303)
