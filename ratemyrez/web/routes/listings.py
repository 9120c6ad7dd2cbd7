"""On-campus and off-campus listing web routes."""

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ratemyrez.catalog import properties_for, property_from_search
from ratemyrez.models.enums import Category
from ratemyrez.services.session import SessionManager
from ratemyrez.services.views import Screen
from ratemyrez.web.dependencies import add_flash_message, get_session_manager
from ratemyrez.web.template_config import property_path, templates

router = APIRouter()


def _render_list(
    request: Request,
    session: SessionManager,
    category: Category,
    faculty: str | None,
) -> HTMLResponse:
    screen = Screen.LIST_ON if category == Category.ON else Screen.LIST_OFF
    return templates.TemplateResponse(
        request,
        "properties/list.html",
        {
            "user": session.current_user,
            "active_screen": screen.value,
            "category": category.value,
            "properties": properties_for(category),
            "faculty": faculty,
        },
    )


@router.get("/on-campus", response_class=HTMLResponse)
async def on_campus(
    request: Request,
    faculty: str | None = None,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    """List on-campus residences."""
    return _render_list(request, session, Category.ON, faculty)


@router.get("/off-campus", response_class=HTMLResponse)
async def off_campus(
    request: Request,
    faculty: str | None = None,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    """List popular off-campus rentals with the address search."""
    return _render_list(request, session, Category.OFF, faculty)


@router.post("/off-campus/search")
async def search_address(
    request: Request,
    search_term: str = Form(""),
) -> RedirectResponse:
    """Open the page of the property synthesized from a typed address."""
    prop = property_from_search(search_term)
    if prop is None:
        add_flash_message(request, "Type an address to search.", "info")
        return RedirectResponse("/off-campus", status_code=303)
    return RedirectResponse(property_path(prop), status_code=303)
