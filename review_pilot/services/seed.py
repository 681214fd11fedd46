"""Fixture data for development databases.

Creates two users with one organization each and a handful of reviews for
the first user. Running it twice is harmless: existing rows are skipped.
"""

import json
import logging
from dataclasses import dataclass, field
from datetime import datetime, timezone

from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings
from ..models import UserRole
from ..schemas.reviews import ReviewCreate
from .errors import DuplicateReviewError
from .organizations import OrganizationService
from .reviews import ReviewService
from .users import UserService

logger = logging.getLogger(__name__)

SAMPLE_USERS = [
    {
        "email": "john.smith@example.com",
        "password": "Password123!",
        "name": "John Smith",
        "role": UserRole.USER,
    },
    {
        "email": "admin@example.com",
        "password": "AdminPass123!",
        "name": "Admin User",
        "role": UserRole.ADMIN,
    },
]

# Reviews are attached to the first sample user
SAMPLE_REVIEWS = [
    {
        "platform": "google",
        "review_id": "google_001",
        "rating": 5,
        "text": "Excellent service! The staff was very friendly and the food was amazing. Will definitely come back.",
        "author_name": "Sarah Johnson",
        "sentiment": "positive",
        "topics": json.dumps(["service", "staff", "food"]),
        "review_date": datetime(2024, 1, 15, tzinfo=timezone.utc),
    },
    {
        "platform": "yelp",
        "review_id": "yelp_001",
        "rating": 2,
        "text": "The wait time was too long and the food was cold when it arrived. Not impressed.",
        "author_name": "Mike Davis",
        "sentiment": "negative",
        "topics": json.dumps(["wait time", "food temperature"]),
        "review_date": datetime(2024, 1, 10, tzinfo=timezone.utc),
    },
    {
        "platform": "facebook",
        "review_id": "fb_001",
        "rating": 4,
        "text": "Good experience overall. The atmosphere was nice and the service was decent.",
        "author_name": "Emily Chen",
        "sentiment": "positive",
        "topics": json.dumps(["atmosphere", "service"]),
        "review_date": datetime(2024, 1, 12, tzinfo=timezone.utc),
    },
    {
        "platform": "tripadvisor",
        "review_id": "ta_001",
        "rating": 3,
        "text": "Average experience. Nothing special but not bad either.",
        "author_name": "Robert Wilson",
        "sentiment": "neutral",
        "topics": json.dumps(["experience"]),
        "review_date": datetime(2024, 1, 8, tzinfo=timezone.utc),
    },
]

TEST_CREDENTIALS = {
    "user": {"email": SAMPLE_USERS[0]["email"], "password": SAMPLE_USERS[0]["password"]},
    "admin": {"email": SAMPLE_USERS[1]["email"], "password": SAMPLE_USERS[1]["password"]},
}


@dataclass
class SeedResult:
    users_created: list[str] = field(default_factory=list)
    reviews_created: list[str] = field(default_factory=list)


async def seed_database(session: AsyncSession, settings: Settings | None = None) -> SeedResult:
    """Insert the sample users, organizations and reviews."""
    users = UserService(session, settings)
    organizations = OrganizationService(session)
    reviews = ReviewService(session)
    result = SeedResult()

    for index, data in enumerate(SAMPLE_USERS):
        user = await users.get_by_email(data["email"])
        if user:
            logger.info(f"User {data['email']} already exists, skipping")
        else:
            user = await users.create_user(
                email=data["email"],
                password=data["password"],
                name=data["name"],
                role=data["role"],
            )
            result.users_created.append(user.email)

        org = await organizations.resolve_for_user(user)

        if index != 0:
            continue

        for review_data in SAMPLE_REVIEWS:
            try:
                await reviews.create(org.id, ReviewCreate(**review_data))
                result.reviews_created.append(review_data["review_id"])
            except DuplicateReviewError:
                logger.info(f"Review {review_data['review_id']} already exists, skipping")

    logger.info(
        f"Seeding finished: {len(result.users_created)} users, "
        f"{len(result.reviews_created)} reviews created"
    )
    return result
