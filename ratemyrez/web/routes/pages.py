"""Static information pages."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ratemyrez.services.session import SessionManager
from ratemyrez.services.views import Screen
from ratemyrez.web.dependencies import get_session_manager
from ratemyrez.web.template_config import templates

router = APIRouter()


@router.get("/about", response_class=HTMLResponse)
async def about(
    request: Request,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "pages/about.html",
        {"user": session.current_user, "active_screen": Screen.ABOUT.value},
    )


@router.get("/contact", response_class=HTMLResponse)
async def contact(
    request: Request,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "pages/contact.html",
        {"user": session.current_user, "active_screen": Screen.CONTACT.value},
    )
