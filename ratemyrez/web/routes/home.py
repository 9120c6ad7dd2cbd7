"""Home/feed web routes."""

from fastapi import APIRouter, Depends, Request
from fastapi.responses import HTMLResponse

from ratemyrez.catalog import ON_CAMPUS_DORMS, POPULAR_OFF_CAMPUS
from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.services.session import SessionManager
from ratemyrez.services.views import Screen
from ratemyrez.web.dependencies import get_session_manager, open_view
from ratemyrez.web.template_config import templates

router = APIRouter()


@router.get("/", response_class=HTMLResponse)
async def home(
    request: Request,
    context: AppContext = Depends(get_app_context),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    """Landing page with the recent-reviews feed."""
    with open_view(context, session) as view:
        view.navigate(Screen.HOME)
        return templates.TemplateResponse(
            request,
            "home/index.html",
            {
                "view": view,
                "user": session.current_user,
                "active_screen": Screen.HOME.value,
                "trending": POPULAR_OFF_CAMPUS[:4],
                "residences": ON_CAMPUS_DORMS[:4],
            },
        )
