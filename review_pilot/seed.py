#!/usr/bin/env python3
"""
Seed Data Script for Review Pilot

Creates the development fixtures:
- 2 Users (John Smith, Admin User) with one organization each
- 4 sample reviews for John across Google, Yelp, Facebook and TripAdvisor

Existing users and reviews are left alone, so it is safe to rerun.

Run with: python -m review_pilot.seed
"""

import asyncio
import logging

from .core import get_settings, init_db, close_db
from .services import TEST_CREDENTIALS, seed_database

logger = logging.getLogger(__name__)


async def main() -> None:
    settings = get_settings()
    if settings.is_production:
        raise SystemExit("Refusing to seed a production database")

    db = await init_db(settings)
    try:
        async with db.session_scope() as session:
            result = await seed_database(session, settings)
    finally:
        await close_db(db)

    print(f"   ✓ Users created: {', '.join(result.users_created) or 'none'}")
    print(f"   ✓ Reviews created: {', '.join(result.reviews_created) or 'none'}")
    print("\nTest credentials:")
    for role, creds in TEST_CREDENTIALS.items():
        print(f"   {role}: {creds['email']} / {creds['password']}")


if __name__ == "__main__":
    logging.basicConfig(level=logging.INFO)
    asyncio.run(main())
