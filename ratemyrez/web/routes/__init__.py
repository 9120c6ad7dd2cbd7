"""Web routes package."""

from fastapi import APIRouter

from ratemyrez.web.routes import auth, home, listings, pages, properties, questions, reviews

web_router = APIRouter()

web_router.include_router(home.router, tags=["web-home"])
web_router.include_router(auth.router, tags=["web-auth"])
web_router.include_router(listings.router, tags=["web-listings"])
web_router.include_router(properties.router, prefix="/properties", tags=["web-properties"])
web_router.include_router(reviews.router, tags=["web-reviews"])
web_router.include_router(questions.router, tags=["web-questions"])
web_router.include_router(pages.router, tags=["web-pages"])
