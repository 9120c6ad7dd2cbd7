"""Enum definitions shared by models, schemas and views."""

from enum import Enum


class Category(str, Enum):
    """Which listing a property was reached from."""

    ON = "ON"  # On-campus residences
    OFF = "OFF"  # Off-campus rentals


class StudentLevel(str, Enum):
    UNDERGRADUATE = "Undergraduate"
    GRADUATE = "Graduate"


class TagPolarity(str, Enum):
    """Whether an amenity tag reads as a plus or a minus."""

    GOOD = "good"
    NEUTRAL = "neutral"
    BAD = "bad"
