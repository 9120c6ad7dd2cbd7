"""Health check route."""

from fastapi import APIRouter, Depends

from ratemyrez.core.context import AppContext, get_app_context

router = APIRouter()


@router.get("/health")
def health_check(context: AppContext = Depends(get_app_context)) -> dict:
    """Liveness plus the backend connection state."""
    return {
        "status": "healthy",
        "service": "ratemyrez",
        "backend": context.state.value,
    }
