"""Seed script to populate the database with sample data."""

from ratemyrez.catalog import find_property
from ratemyrez.core.config import settings
from ratemyrez.core.context import AppContext
from ratemyrez.core.database import engine
from ratemyrez.services.auth import ProviderError
from ratemyrez.services.store import QUESTIONS, REPLIES, REVIEWS, SERVER_TIMESTAMP
from ratemyrez.services.subscriptions import home_feed_query

SAMPLE_PASSWORD = "password123"

SAMPLE_REVIEWS = [
    {
        "property_id": "v1",
        "rating": 4,
        "location_rating": 4,
        "rent": 0,
        "distance": 5,
        "comment": "Great first-year community. Laundry lines get long on Sundays.",
        "tags": ["social", "noise"],
        "student_level": "Undergraduate",
    },
    {
        "property_id": "cmh",
        "rating": 5,
        "location_rating": 5,
        "rent": 0,
        "distance": 3,
        "comment": "Suite style with a kitchen, close to everything.",
        "tags": ["quiet", "wifi"],
        "student_level": "Undergraduate",
    },
    {
        "property_id": "icon-330-phillip",
        "rating": 3,
        "location_rating": 5,
        "rent": 1150,
        "distance": 4,
        "comment": "Amazing location, but management takes ages to answer.",
        "tags": ["ac", "gym", "mgmt"],
        "student_level": "Undergraduate",
    },
    {
        "property_id": "wcri",
        "rating": 4,
        "location_rating": 3,
        "rent": 700,
        "distance": 10,
        "comment": "Cheapest option around and the co-op chores are fair.",
        "tags": ["social"],
        "student_level": "Graduate",
    },
]


def seed_database() -> None:
    """Seed the database with sample data."""
    context = AppContext(settings, engine).connect()
    store = context.store
    auth = context.auth

    if store.run_query(home_feed_query(1)):
        print("Database already has data. Skipping seed.")
        context.close()
        return

    print("Seeding database...")

    email = f"student{settings.ALLOWED_EMAIL_DOMAIN}"
    try:
        user = auth.create_user_with_email_and_password(email, SAMPLE_PASSWORD)
    except ProviderError:
        user = auth.sign_in_with_email_and_password(email, SAMPLE_PASSWORD)
    print(f"Created user: {user.email} (password: {SAMPLE_PASSWORD})")

    for sample in SAMPLE_REVIEWS:
        prop = find_property(sample["property_id"])
        review_id = store.create(
            REVIEWS,
            {
                **sample,
                "property_name": prop.name,
                "category": prop.category.value,
                "user_id": user.uid,
                "user_email": user.email,
                "helpful_count": 0,
                "timestamp": SERVER_TIMESTAMP,
            },
        )
        print(f"Created review {review_id} for {prop.name}")

    guest = auth.sign_in_anonymously()
    prop = find_property("icon-330-phillip")
    question_id = store.create(
        QUESTIONS,
        {
            "property_id": prop.id,
            "property_name": prop.name,
            "user_id": guest.uid,
            "text": "Is the gym open 24/7?",
            "reply_count": 0,
            "timestamp": SERVER_TIMESTAMP,
        },
    )
    store.create(
        REPLIES,
        {
            "question_id": question_id,
            "user_id": user.uid,
            "text": "Yes, with your fob.",
            "timestamp": SERVER_TIMESTAMP,
        },
    )
    print(f"Created question {question_id} with one reply")

    context.close()
    print("\nSeed complete!")


if __name__ == "__main__":
    seed_database()
