"""Review Pydantic schemas for store records and form input."""

from datetime import datetime

from pydantic import BaseModel, Field, field_validator

from ratemyrez.catalog import AMENITY_TAGS_BY_ID
from ratemyrez.models.enums import StudentLevel
from ratemyrez.schemas.property import Property


class ReviewRecord(BaseModel):
    """Review as delivered in a snapshot.

    Optional numeric fields may be ``None`` as well as ``0``; both mean unset.
    ``timestamp`` is ``None`` until the store has assigned it.
    """

    id: int
    property_id: str
    property_name: str
    category: str | None = None
    user_id: str
    user_email: str | None = None
    rating: int
    location_rating: int | None = None
    rent: float | None = None
    distance: float | None = None
    comment: str = ""
    tags: list[str] = Field(default_factory=list)
    image: str | None = None
    student_level: StudentLevel | None = None
    helpful_count: int = 0
    voted_uids: list[str] = Field(default_factory=list)
    timestamp: datetime | None = None
    last_edited: datetime | None = None

    model_config = {"from_attributes": True}

    @field_validator("tags", "voted_uids", mode="before")
    @classmethod
    def none_to_empty(cls, value: list[str] | None) -> list[str]:
        return value or []

    def has_voted(self, uid: str | None) -> bool:
        return uid is not None and uid in self.voted_uids


class ReviewForm(BaseModel):
    """Editable review fields.

    Only the star rating is checked; rent, distance and location rating are
    accepted as given.
    """

    rating: int = Field(ge=1, le=5)
    location_rating: int = 0
    rent: float = 0
    distance: float = 0
    comment: str = ""
    tags: list[str] = Field(default_factory=list)
    image: str | None = None
    student_level: StudentLevel | None = None

    @field_validator("tags")
    @classmethod
    def known_tags_only(cls, value: list[str]) -> list[str]:
        """Drop tags outside the amenity catalog and duplicates."""
        return list(dict.fromkeys(tag for tag in value if tag in AMENITY_TAGS_BY_ID))

    @field_validator("student_level", mode="before")
    @classmethod
    def blank_level_is_unset(cls, value: str | None) -> str | None:
        return value or None

    def to_fields(self) -> dict:
        """Store field mapping for create/update."""
        data = self.model_dump()
        if self.student_level is not None:
            data["student_level"] = self.student_level.value
        return data


class ReviewStatsResponse(BaseModel):
    """Schema for aggregate review statistics."""

    avg_rating: float
    avg_rent: int
    avg_dist: int
    count: int


class PropertyDetailResponse(BaseModel):
    """Schema for a property with its stats and sorted reviews."""

    property: Property
    sort: str
    stats: ReviewStatsResponse
    reviews: list[ReviewRecord]
