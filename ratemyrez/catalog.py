"""Static catalog: residences, popular rentals, amenity tags and faculties."""

import re
from dataclasses import dataclass

from ratemyrez.models.enums import Category, TagPolarity
from ratemyrez.schemas.property import Property

CUSTOM_ADDRESS_TYPE = "Custom Address"
DEFAULT_CITY = "Waterloo, ON"

ON_CAMPUS_DORMS = [
    Property(
        id="cmh",
        name="Claudette Millar Hall (CMH)",
        type="Traditional",
        address="Claudette Millar Hall, Waterloo, ON",
        category=Category.ON,
    ),
    Property(
        id="rev",
        name="Ron Eydt Village (REV)",
        type="Traditional",
        address="Ron Eydt Village, Waterloo, ON",
        category=Category.ON,
    ),
    Property(
        id="v1",
        name="Village 1 (V1)",
        type="Traditional",
        address="Village 1, Waterloo, ON",
        category=Category.ON,
    ),
    Property(
        id="mkv",
        name="Mackenzie King Village (MKV)",
        type="Suite Style",
        address="Mackenzie King Village, Waterloo, ON",
        category=Category.ON,
    ),
    Property(
        id="uwp",
        name="UW Place (UWP)",
        type="Suite Style",
        address="UW Place, Waterloo, ON",
        category=Category.ON,
    ),
    Property(
        id="clv",
        name="Columbia Lake Village (CLV)",
        type="Townhouse",
        address="Columbia Lake Village, Waterloo, ON",
        category=Category.ON,
    ),
    Property(
        id="mh",
        name="Minota Hagey (MH)",
        type="Traditional",
        address="Minota Hagey Residence, Waterloo, ON",
        category=Category.ON,
    ),
]

POPULAR_OFF_CAMPUS = [
    Property(
        id="icon-330-phillip",
        name="ICON (330 Phillip St)",
        type="Apartment",
        address="330 Phillip St, Waterloo, ON",
        category=Category.OFF,
    ),
    Property(
        id="rezone-blair",
        name="RezOne: Blair House",
        type="Apartment",
        address="256 Phillip St, Waterloo, ON",
        category=Category.OFF,
    ),
    Property(
        id="rezone-fergus",
        name="RezOne: Fergus House",
        type="Apartment",
        address="254 Phillip St, Waterloo, ON",
        category=Category.OFF,
    ),
    Property(
        id="sage-condos",
        name="Sage Condos",
        type="Condo",
        address="Sage Condos Waterloo",
        category=Category.OFF,
    ),
    Property(
        id="wcri",
        name="WCRI",
        type="Co-op Housing",
        address="268 Phillip St, Waterloo, ON",
        category=Category.OFF,
    ),
    Property(
        id="accommod8u",
        name="Accommod8u (General)",
        type="Rental Agency",
        address="Waterloo, ON",
        category=Category.OFF,
    ),
]

FACULTIES = ["Engineering", "Math", "Science", "Arts", "Environment", "Health"]


@dataclass(frozen=True)
class AmenityTag:
    id: str
    label: str
    icon: str
    polarity: TagPolarity


AMENITY_TAGS = [
    AmenityTag("ac", "AC", "❄️", TagPolarity.GOOD),
    AmenityTag("ensuite", "Ensuite Bath", "🚿", TagPolarity.GOOD),
    AmenityTag("gym", "Gym Nearby", "💪", TagPolarity.GOOD),
    AmenityTag("wifi", "Fast Wifi", "🚀", TagPolarity.GOOD),
    AmenityTag("quiet", "Quiet", "🤫", TagPolarity.GOOD),
    AmenityTag("social", "Social Vibe", "🎉", TagPolarity.NEUTRAL),
    AmenityTag("pests", "Pest Issues", "🪳", TagPolarity.BAD),
    AmenityTag("noise", "Noisy", "🔊", TagPolarity.BAD),
    AmenityTag("mgmt", "Bad Management", "📉", TagPolarity.BAD),
]

AMENITY_TAGS_BY_ID = {tag.id: tag for tag in AMENITY_TAGS}

_CATALOG = {prop.id: prop for prop in ON_CAMPUS_DORMS + POPULAR_OFF_CAMPUS}

_NON_SLUG_CHAR = re.compile(r"[^a-z0-9]")


def properties_for(category: Category) -> list[Property]:
    """Catalog list shown on the on-campus or off-campus screen."""
    return ON_CAMPUS_DORMS if category == Category.ON else POPULAR_OFF_CAMPUS


def slugify_search(text: str) -> str:
    """Lowercase the trimmed text and replace every non [a-z0-9] char with '-'."""
    return _NON_SLUG_CHAR.sub("-", text.strip().lower())


def property_from_search(text: str) -> Property | None:
    """Synthesize a property for a free-text address search.

    Returns None for blank input.
    """
    name = text.strip()
    if not name:
        return None
    return Property(
        id=slugify_search(name),
        name=name,
        type=CUSTOM_ADDRESS_TYPE,
        address=f"{name}, {DEFAULT_CITY}",
        category=Category.OFF,
    )


def find_property(property_id: str) -> Property | None:
    return _CATALOG.get(property_id)


def resolve_property(property_id: str, name: str | None = None) -> Property:
    """Catalog entry for ``property_id``, or a property rebuilt from its name.

    Properties reached from a feed card or an earlier search are not in the
    catalog; they keep the id and the display name carried on the review.
    """
    prop = find_property(property_id)
    if prop is not None:
        return prop
    if name and name.strip():
        return Property(
            id=property_id,
            name=name.strip(),
            type=CUSTOM_ADDRESS_TYPE,
            address=f"{name.strip()}, {DEFAULT_CITY}",
            category=Category.OFF,
        )
    return Property(id=property_id, name=property_id, type="Property", category=Category.OFF)
