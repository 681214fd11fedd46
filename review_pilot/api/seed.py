"""Development fixture loading."""

import logging

from fastapi import APIRouter, HTTPException, status

from ..core import SessionDep, SettingsDep
from ..services import TEST_CREDENTIALS, seed_database

logger = logging.getLogger(__name__)

router = APIRouter(tags=["seed"])


@router.post("/seed")
async def seed(session: SessionDep, settings: SettingsDep):
    """Load sample users and reviews. Refused in production."""
    if settings.is_production:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Seeding is not allowed in production",
        )

    result = await seed_database(session, settings)
    return {
        "success": True,
        "message": "Database seeded successfully",
        "usersCreated": len(result.users_created),
        "reviewsCreated": len(result.reviews_created),
        "testCredentials": TEST_CREDENTIALS,
    }
