"""Property Pydantic schema."""

from urllib.parse import quote_plus

from pydantic import BaseModel

from ratemyrez.models.enums import Category


class Property(BaseModel):
    """Reviewable property. Not persisted: catalog entry or built from a search."""

    id: str
    name: str
    type: str
    address: str = ""
    category: Category | None = None

    model_config = {"frozen": True}

    @property
    def short_name(self) -> str:
        """Name without the parenthesised abbreviation."""
        return self.name.split("(")[0].strip()

    @property
    def maps_url(self) -> str | None:
        if not self.address:
            return None
        return f"https://www.google.com/maps/search/?api=1&query={quote_plus(self.address)}"
