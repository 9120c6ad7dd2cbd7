"""Review web routes: write, edit and helpful votes."""

import logging

from fastapi import APIRouter, Depends, File, Form, Request, UploadFile
from fastapi.responses import HTMLResponse, RedirectResponse
from pydantic import ValidationError

from ratemyrez.catalog import AMENITY_TAGS, resolve_property
from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.core.errors import AuthenticationRequired, RezError
from ratemyrez.models.enums import Category, StudentLevel
from ratemyrez.schemas.review import ReviewForm, ReviewRecord
from ratemyrez.services import reviews as review_service
from ratemyrez.services.images import prepare_review_photo
from ratemyrez.services.session import SessionManager
from ratemyrez.web.dependencies import (
    add_flash_message,
    back_to,
    get_session_manager,
    login_redirect,
)
from ratemyrez.web.template_config import property_path, templates

logger = logging.getLogger(__name__)

router = APIRouter()

RATING_REQUIRED = "Please choose a star rating."


def _number(value: str) -> float:
    """Blank or unparsable numeric inputs count as unset (0)."""
    try:
        return float(value) if value.strip() else 0
    except ValueError:
        return 0


def _render_form(
    request: Request,
    session: SessionManager,
    action: str,
    property_name: str,
    cancel_url: str,
    review: ReviewRecord | None = None,
    error: str | None = None,
    status_code: int = 200,
) -> HTMLResponse:
    return templates.TemplateResponse(
        request,
        "reviews/form.html",
        {
            "user": session.current_user,
            "action": action,
            "property_name": property_name,
            "cancel_url": cancel_url,
            "review": review,
            "tags": AMENITY_TAGS,
            "student_levels": list(StudentLevel),
            "error": error,
        },
        status_code=status_code,
    )


async def _read_photo(context: AppContext, photo: UploadFile | None) -> str | None:
    if photo is None or not photo.filename:
        return None
    data = await photo.read()
    if not data:
        return None
    return prepare_review_photo(
        data,
        max_width=context.settings.IMAGE_MAX_WIDTH,
        quality=context.settings.IMAGE_JPEG_QUALITY,
    )


@router.get("/properties/{property_id}/reviews/new", response_class=HTMLResponse, response_model=None)
async def new_review_page(
    request: Request,
    property_id: str,
    name: str | None = None,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Display the write-review form."""
    prop = resolve_property(property_id, name)
    if not session.can_write:
        add_flash_message(request, AuthenticationRequired.message, "info")
        return login_redirect(request, property_path(prop))
    return _render_form(
        request,
        session,
        action=f"/properties/{prop.id}/reviews",
        property_name=prop.name,
        cancel_url=property_path(prop),
    )


@router.post("/properties/{property_id}/reviews", response_class=HTMLResponse, response_model=None)
async def create_review_submit(
    request: Request,
    property_id: str,
    name: str | None = Form(None),
    category: str | None = Form(None),
    rating: int = Form(0),
    location_rating: int = Form(0),
    rent: str = Form(""),
    distance: str = Form(""),
    comment: str = Form(""),
    tags: list[str] = Form(default=[]),
    student_level: str = Form(""),
    photo: UploadFile | None = File(None),
    context: AppContext = Depends(get_app_context),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Process the write-review form."""
    prop = resolve_property(property_id, name)
    detail_url = property_path(prop)

    try:
        image = await _read_photo(context, photo)
        form = ReviewForm(
            rating=rating,
            location_rating=location_rating,
            rent=_number(rent),
            distance=_number(distance),
            comment=comment,
            tags=tags,
            image=image,
            student_level=student_level,
        )
    except ValidationError:
        return _render_form(
            request,
            session,
            action=f"/properties/{prop.id}/reviews",
            property_name=prop.name,
            cancel_url=detail_url,
            error=RATING_REQUIRED,
            status_code=400,
        )
    except RezError as exc:
        add_flash_message(request, exc.message, "error")
        return RedirectResponse(detail_url, status_code=303)

    try:
        review_service.create_review(
            session,
            context.store if context.ready else None,
            prop,
            Category(category) if category in ("ON", "OFF") else prop.category,
            form,
        )
    except AuthenticationRequired as exc:
        add_flash_message(request, exc.message, "info")
        return login_redirect(request, detail_url)
    except RezError as exc:
        logger.warning("Error posting review: %s", exc.message)
        add_flash_message(request, f"Error posting: {exc.message}", "error")
        return RedirectResponse(detail_url, status_code=303)

    add_flash_message(request, "Review posted!", "success")
    return RedirectResponse(detail_url, status_code=303)


@router.get("/reviews/{review_id}/edit", response_class=HTMLResponse, response_model=None)
async def edit_review_page(
    request: Request,
    review_id: int,
    context: AppContext = Depends(get_app_context),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Display the edit form for the author's own review."""
    try:
        review = review_service.get_review(context.store if context.ready else None, review_id)
    except RezError as exc:
        add_flash_message(request, exc.message, "error")
        return RedirectResponse("/", status_code=303)

    prop = resolve_property(review.property_id, review.property_name)
    user = session.current_user
    if not session.can_write or user is None or user.uid != review.user_id:
        add_flash_message(request, "You can only edit your own reviews.", "error")
        return RedirectResponse(property_path(prop), status_code=303)

    return _render_form(
        request,
        session,
        action=f"/reviews/{review_id}/edit",
        property_name=prop.name,
        cancel_url=property_path(prop),
        review=review,
    )


@router.post("/reviews/{review_id}/edit", response_class=HTMLResponse, response_model=None)
async def edit_review_submit(
    request: Request,
    review_id: int,
    rating: int = Form(0),
    location_rating: int = Form(0),
    rent: str = Form(""),
    distance: str = Form(""),
    comment: str = Form(""),
    tags: list[str] = Form(default=[]),
    student_level: str = Form(""),
    remove_photo: bool = Form(False),
    photo: UploadFile | None = File(None),
    context: AppContext = Depends(get_app_context),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Process the edit form; every editable field is replaced."""
    store = context.store if context.ready else None
    try:
        review = review_service.get_review(store, review_id)
    except RezError as exc:
        add_flash_message(request, exc.message, "error")
        return RedirectResponse("/", status_code=303)

    prop = resolve_property(review.property_id, review.property_name)
    detail_url = property_path(prop)

    try:
        image = await _read_photo(context, photo)
        if image is None and not remove_photo:
            image = review.image
        form = ReviewForm(
            rating=rating,
            location_rating=location_rating,
            rent=_number(rent),
            distance=_number(distance),
            comment=comment,
            tags=tags,
            image=image,
            student_level=student_level,
        )
    except ValidationError:
        return _render_form(
            request,
            session,
            action=f"/reviews/{review_id}/edit",
            property_name=prop.name,
            cancel_url=detail_url,
            review=review,
            error=RATING_REQUIRED,
            status_code=400,
        )
    except RezError as exc:
        add_flash_message(request, exc.message, "error")
        return RedirectResponse(detail_url, status_code=303)

    try:
        review_service.update_review(session, store, review_id, form)
    except AuthenticationRequired as exc:
        add_flash_message(request, exc.message, "info")
        return login_redirect(request, detail_url)
    except RezError as exc:
        add_flash_message(request, exc.message, "error")
        return RedirectResponse(detail_url, status_code=303)

    add_flash_message(request, "Review updated!", "success")
    return RedirectResponse(detail_url, status_code=303)


@router.post("/reviews/{review_id}/helpful")
async def helpful_vote(
    request: Request,
    review_id: int,
    context: AppContext = Depends(get_app_context),
    session: SessionManager = Depends(get_session_manager),
) -> RedirectResponse:
    """Count one helpful vote per voter."""
    return_url = back_to(request, "/")
    try:
        review_service.cast_helpful_vote(
            session, context.store if context.ready else None, review_id
        )
    except AuthenticationRequired as exc:
        add_flash_message(request, exc.message, "info")
        return login_redirect(request, return_url)
    except RezError as exc:
        add_flash_message(request, exc.message, "error")
    return RedirectResponse(return_url, status_code=303)
