"""FastAPI application entry point."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from pathlib import Path

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse, Response
from fastapi.staticfiles import StaticFiles
from starlette.middleware.sessions import SessionMiddleware

from ratemyrez.api.routes import health, live, properties, questions, reviews
from ratemyrez.core.config import settings
from ratemyrez.core.context import AppContext, get_app_context, set_app_context
from ratemyrez.core.database import engine
from ratemyrez.core.errors import (
    AuthenticationRequired,
    BackendUnavailable,
    NotReviewAuthor,
    RecordNotFound,
    RezError,
)
from ratemyrez.core.log_config import setup_logging
from ratemyrez.web.routes import web_router
from ratemyrez.web.template_config import templates

logger = logging.getLogger(__name__)

# Static files directory
BASE_DIR = Path(__file__).resolve().parent

ERROR_STATUS = {
    AuthenticationRequired: 401,
    NotReviewAuthor: 403,
    RecordNotFound: 404,
    BackendUnavailable: 503,
}


def status_for(exc: RezError) -> int:
    for error_type, status_code in ERROR_STATUS.items():
        if isinstance(exc, error_type):
            return status_code
    return 400


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Application lifespan manager."""
    setup_logging(settings.LOG_LEVEL)
    context = get_app_context()
    if not context.ready:
        context = set_app_context(AppContext(settings, engine).connect())
    yield
    context.close()
    logger.info("Backend closed")


app = FastAPI(
    title=settings.PROJECT_NAME,
    version=settings.VERSION,
    description="Student housing reviews for on-campus residences and off-campus rentals",
    lifespan=lifespan,
)

# Session middleware for the cookie-backed sign-in session
app.add_middleware(
    SessionMiddleware,  # type: ignore[arg-type]
    secret_key=settings.SECRET_KEY,
    session_cookie="ratemyrez_session",
    max_age=86400 * 7,  # 7 days
    same_site="lax",
    https_only=not settings.DEBUG,
)


@app.exception_handler(RezError)
async def rez_error_handler(request: Request, exc: RezError) -> Response:
    """JSON errors under /api, an error page everywhere else."""
    status_code = status_for(exc)
    if request.url.path.startswith("/api"):
        return JSONResponse({"detail": exc.message}, status_code=status_code)
    return templates.TemplateResponse(
        request,
        "error.html",
        {"user": None, "message": exc.message, "status_code": status_code},
        status_code=status_code,
    )


# Mount static files
app.mount("/static", StaticFiles(directory=str(BASE_DIR / "static")), name="static")

# Include API routers
app.include_router(health.router, prefix="/api", tags=["health"])
app.include_router(properties.router, prefix="/api")
app.include_router(reviews.router, prefix="/api")
app.include_router(questions.router, prefix="/api")
app.include_router(live.router, prefix="/api")

# Include web routes (Jinja2 frontend)
app.include_router(web_router)


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "ratemyrez.main:app",
        host=settings.HOST,
        port=settings.PORT,
        reload=settings.DEBUG,
    )
