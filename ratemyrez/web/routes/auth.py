"""Authentication web routes."""

import logging

from fastapi import APIRouter, Depends, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse

from ratemyrez.core.errors import RezError
from ratemyrez.services.session import SessionManager
from ratemyrez.web.dependencies import add_flash_message, get_session_manager
from ratemyrez.web.template_config import templates

logger = logging.getLogger(__name__)

router = APIRouter()


def _safe_next(next_url: str | None) -> str:
    """Only same-site paths are followed after sign-in."""
    if not next_url or not next_url.startswith("/") or next_url.startswith("//"):
        return "/"
    return next_url


@router.get("/login", response_class=HTMLResponse, response_model=None)
async def login_page(
    request: Request,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Display login form."""
    next_url = _safe_next(request.query_params.get("next"))
    if session.can_write:
        return RedirectResponse(next_url, status_code=303)
    return templates.TemplateResponse(
        request,
        "auth/login.html",
        {"user": session.current_user, "next": next_url},
    )


@router.post("/login", response_class=HTMLResponse, response_model=None)
async def login(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next_url: str = Form("/"),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Process login form."""
    try:
        session.log_in(email, password)
    except RezError as exc:
        return templates.TemplateResponse(
            request,
            "auth/login.html",
            {
                "user": session.current_user,
                "error": exc.message,
                "next": _safe_next(next_url),
                "email": email,
            },
            status_code=400,
        )

    add_flash_message(request, "Welcome back!", "success")
    return RedirectResponse(_safe_next(next_url), status_code=303)


@router.get("/signup", response_class=HTMLResponse, response_model=None)
async def signup_page(
    request: Request,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Display sign-up form."""
    next_url = _safe_next(request.query_params.get("next"))
    if session.can_write:
        return RedirectResponse(next_url, status_code=303)
    return templates.TemplateResponse(
        request,
        "auth/signup.html",
        {"user": session.current_user, "next": next_url},
    )


@router.post("/signup", response_class=HTMLResponse, response_model=None)
async def signup(
    request: Request,
    email: str = Form(""),
    password: str = Form(""),
    next_url: str = Form("/"),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Process sign-up form."""
    try:
        session.sign_up(email, password)
    except RezError as exc:
        return templates.TemplateResponse(
            request,
            "auth/signup.html",
            {
                "user": session.current_user,
                "error": exc.message,
                "next": _safe_next(next_url),
                "email": email,
            },
            status_code=400,
        )

    add_flash_message(request, "Account created successfully!", "success")
    return RedirectResponse(_safe_next(next_url), status_code=303)


@router.get("/reset-password", response_class=HTMLResponse)
async def reset_page(
    request: Request,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    """Display the forgot-password form."""
    return templates.TemplateResponse(
        request, "auth/reset.html", {"user": session.current_user}
    )


@router.post("/reset-password", response_class=HTMLResponse)
async def reset_request(
    request: Request,
    email: str = Form(""),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    """Send a reset link; the page never says whether the address exists."""
    try:
        message = session.request_password_reset(email)
    except RezError as exc:
        return templates.TemplateResponse(
            request,
            "auth/reset.html",
            {"user": session.current_user, "error": exc.message, "email": email},
            status_code=400,
        )
    return templates.TemplateResponse(
        request,
        "auth/reset.html",
        {"user": session.current_user, "success": message, "email": email},
    )


@router.get("/reset-password/{token}", response_class=HTMLResponse)
async def reset_confirm_page(
    request: Request,
    token: str,
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse:
    """Display the new-password form for an emailed reset link."""
    return templates.TemplateResponse(
        request,
        "auth/reset_confirm.html",
        {"user": session.current_user, "token": token},
    )


@router.post("/reset-password/{token}", response_class=HTMLResponse, response_model=None)
async def reset_confirm(
    request: Request,
    token: str,
    password: str = Form(""),
    session: SessionManager = Depends(get_session_manager),
) -> HTMLResponse | RedirectResponse:
    """Set the new password, then send the user to log in."""
    try:
        session.confirm_password_reset(token, password)
    except RezError as exc:
        return templates.TemplateResponse(
            request,
            "auth/reset_confirm.html",
            {"user": session.current_user, "token": token, "error": exc.message},
            status_code=400,
        )
    add_flash_message(request, "Password updated. Log in with your new password.", "success")
    return RedirectResponse("/login", status_code=303)


@router.get("/logout")
async def logout(
    request: Request,
    session: SessionManager = Depends(get_session_manager),
) -> RedirectResponse:
    """Log out; browsing continues as a guest."""
    session.log_out()
    return RedirectResponse("/", status_code=303)
