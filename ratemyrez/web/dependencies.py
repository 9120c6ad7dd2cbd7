"""Web-specific dependencies for cookie sessions and flash messages."""

from urllib.parse import quote

from fastapi import Depends, Request
from fastapi.responses import RedirectResponse

from ratemyrez.core.context import AppContext, get_app_context
from ratemyrez.services.session import SessionManager
from ratemyrez.services.subscriptions import ViewSubscriptions
from ratemyrez.services.views import ViewState


def get_session_manager(
    request: Request,
    context: AppContext = Depends(get_app_context),
) -> SessionManager:
    """Session manager bound to this browser's session cookie."""
    return SessionManager(
        context.auth if context.ready else None,
        request.session,
        context.settings.ALLOWED_EMAIL_DOMAIN,
    )


def open_view(context: AppContext, session: SessionManager) -> ViewState:
    """View state for rendering one page; close it when the page is built."""
    return ViewState(
        session,
        ViewSubscriptions(context.require_store()),
        feed_limit=context.settings.HOME_FEED_LIMIT,
    )


def login_redirect(request: Request, next_url: str | None = None) -> RedirectResponse:
    """Send the caller to the sign-in page, coming back afterwards."""
    target = next_url or request.url.path
    return RedirectResponse(f"/login?next={quote(target, safe='/')}", status_code=303)


def back_to(request: Request, fallback: str) -> str:
    """Same-site page the form was posted from, else ``fallback``."""
    referer = request.headers.get("referer", "")
    base = str(request.base_url)
    if referer.startswith(base):
        return "/" + referer[len(base) :]
    return fallback


def get_flash_messages(request: Request) -> list[dict]:
    """Get and clear flash messages from session."""
    messages = request.session.pop("flash_messages", [])
    return messages


def add_flash_message(request: Request, message: str, category: str = "info") -> None:
    """Add a flash message to the session."""
    # Reassigned so the session middleware sees the change
    request.session["flash_messages"] = [
        *request.session.get("flash_messages", []),
        {"message": message, "category": category},
    ]
