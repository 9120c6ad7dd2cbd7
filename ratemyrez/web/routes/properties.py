"""Property detail web routes: reviews and community Q&A tabs."""

from fastapi import APIRouter, Depends, Query, Request
from fastapi.responses import HTMLResponse

from ratemyrez.catalog import resolve_property
from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.models.enums import Category
from ratemyrez.services.aggregation import SortMode
from ratemyrez.services.session import SessionManager
from ratemyrez.services.views import PropertyTab, Screen
from ratemyrez.web.dependencies import get_session_manager, open_view
from ratemyrez.web.template_config import templates

router = APIRouter()


@router.get("/{property_id}", response_class=HTMLResponse)
async def property_detail(
    request: Request,
    property_id: str,
    name: str | None = None,
    tab: str | None = None,
    sort: str | None = None,
    faculty: str | None = None,
    expand: list[int] = Query(default=[]),
    context: AppContext = Depends(get_app_context),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    """Display a property with its stats and the selected tab."""
    prop = resolve_property(property_id, name)

    with open_view(context, session) as view:
        view.select_property(prop)
        view.set_tab(PropertyTab.parse(tab))
        view.set_sort(SortMode.parse(sort))
        threads = [view.expand_replies(question_id) for question_id in expand]

        return templates.TemplateResponse(
            request,
            "properties/detail.html",
            {
                "view": view,
                "user": session.current_user,
                "active_screen": Screen.PROPERTY.value,
                "property": prop,
                "stats": view.stats,
                "threads": {thread.question_id: thread for thread in threads},
                "faculty": faculty,
                "back_url": "/on-campus" if view.category == Category.ON else "/off-campus",
            },
        )
