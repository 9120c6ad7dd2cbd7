"""Jinja2 template configuration."""

from datetime import datetime
from pathlib import Path
from urllib.parse import urlencode

from fastapi.templating import Jinja2Templates

from ratemyrez.catalog import AMENITY_TAGS_BY_ID, FACULTIES, find_property
from ratemyrez.core.config import settings
from ratemyrez.schemas.property import Property
from ratemyrez.services.aggregation import SortMode
from ratemyrez.services.subscriptions import snapshot_digest
from ratemyrez.web.dependencies import get_flash_messages


def format_date(value: datetime | None) -> str:
    """Short date for a record; records not yet stamped read 'Just now'."""
    if value is None:
        return "Just now"
    return f"{value:%b} {value.day}, {value.year}"


def format_number(value: float | None) -> str:
    if not value:
        return ""
    return f"{value:g}"


def property_path(
    prop: Property,
    tab: str | None = None,
    sort: str | None = None,
    **params: object,
) -> str:
    """URL of a property page; non-catalog properties carry their name along."""
    query: dict[str, object] = {}
    if find_property(prop.id) is None:
        query["name"] = prop.name
    if tab:
        query["tab"] = tab
    if sort:
        query["sort"] = sort
    query.update({key: value for key, value in params.items() if value is not None})
    suffix = f"?{urlencode(query, doseq=True)}" if query else ""
    return f"/properties/{prop.id}{suffix}"


# Template directory is at ratemyrez/templates/
BASE_DIR = Path(__file__).resolve().parent.parent
templates = Jinja2Templates(directory=str(BASE_DIR / "templates"))

templates.env.filters["date"] = format_date
templates.env.filters["number"] = format_number
templates.env.filters["digest"] = snapshot_digest
templates.env.globals.update(
    project_name=settings.PROJECT_NAME,
    amenity_tags=AMENITY_TAGS_BY_ID,
    faculties=FACULTIES,
    sort_modes=list(SortMode),
    property_path=property_path,
    get_flash_messages=get_flash_messages,
)
