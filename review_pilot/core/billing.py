"""Trial and subscription gating.

This module provides:
1. Trial window checks
2. Feature gating based on trial / subscription state
3. The ``require_feature`` dependency factory
"""

import logging
import math
from datetime import datetime, timedelta, timezone
from typing import Annotated

from fastapi import Depends, HTTPException, status

from ..models import SubscriptionStatus, User, as_utc
from .config import FREE_FEATURES, Settings
from .dependencies import get_current_user
from .security import generate_token

logger = logging.getLogger(__name__)


def is_trial_active(user: User, now: datetime | None = None) -> bool:
    """True while the user is on a trial that has not ended yet."""
    if user.subscription_status != SubscriptionStatus.TRIAL or not user.trial_end_date:
        return False
    now = now or datetime.now(timezone.utc)
    return as_utc(user.trial_end_date) > now


def get_trial_days_remaining(user: User, now: datetime | None = None) -> int:
    """Whole days left in the trial, rounded up. Zero once it has ended."""
    if not is_trial_active(user, now):
        return 0
    now = now or datetime.now(timezone.utc)
    remaining = as_utc(user.trial_end_date) - now
    return max(0, math.ceil(remaining / timedelta(days=1)))


def has_active_subscription(user: User) -> bool:
    return user.subscription_status == SubscriptionStatus.ACTIVE


def can_access_feature(user: User, feature: str, now: datetime | None = None) -> bool:
    """Trial and paid accounts get everything; everyone else the free set."""
    if is_trial_active(user, now):
        return True
    if has_active_subscription(user):
        return True
    return feature in FREE_FEATURES


def needs_upgrade(user: User, now: datetime | None = None) -> bool:
    return not is_trial_active(user, now) and not has_active_subscription(user)


def create_session(user: User, settings: Settings | None = None) -> tuple[str, User]:
    """Issue a session token for a freshly authenticated user."""
    token = generate_token(user.id, user.email, user.role, settings=settings)
    return token, user


def require_feature(feature: str):
    """
    Dependency factory that requires a specific feature.

    Usage:
        @router.post("/ai/respond")
        async def respond(
            user: Annotated[User, Depends(require_feature("ai_response"))],
        ):
            ...
    """
    async def _check_feature(
        user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if not can_access_feature(user, feature):
            logger.info(f"User {user.id} blocked from '{feature}': upgrade required")
            raise HTTPException(
                status_code=status.HTTP_402_PAYMENT_REQUIRED,
                detail={
                    "error": "Your trial has ended. Please upgrade to continue.",
                    "feature": feature,
                    "upgrade_url": "/subscription",
                },
            )
        return user

    return _check_feature


# Type aliases for cleaner dependency injection
AIResponseDep = Annotated[User, Depends(require_feature("ai_response"))]

