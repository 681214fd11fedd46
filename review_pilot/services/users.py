"""User service: account creation, lookup and credential checks."""

import logging
from datetime import timedelta
from typing import Literal

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..core.config import Settings, get_settings
from ..core.security import hash_password, verify_password
from ..models import SubscriptionStatus, User, UserRole, utcnow
from .errors import DuplicateUserError

logger = logging.getLogger(__name__)


class UserService:
    """Service for managing user accounts."""

    def __init__(self, session: AsyncSession, settings: Settings | None = None):
        self.session = session
        self.settings = settings or get_settings()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.email == email.lower())
        )
        return result.scalar_one_or_none()

    async def get_by_id(self, user_id: int) -> User | None:
        return await self.session.get(User, user_id)

    async def create_user(
        self,
        email: str,
        password: str | None,
        name: str,
        role: UserRole = UserRole.USER,
    ) -> User:
        """Create an account with a fresh trial window.

        Raises:
            DuplicateUserError: If the email is already registered
        """
        email = email.lower()
        if await self.get_by_email(email):
            raise DuplicateUserError(f"User {email} already exists")

        user = User(
            email=email,
            password_hash=hash_password(password, self.settings) if password else None,
            name=name,
            role=role,
            subscription_status=SubscriptionStatus.TRIAL,
            trial_end_date=utcnow() + timedelta(days=self.settings.trial_days),
        )

        try:
            async with self.session.begin_nested():
                self.session.add(user)
        except IntegrityError as e:
            # Lost a race with a concurrent signup for the same email
            logger.info(f"Concurrent signup for {email}: {e.orig}")
            raise DuplicateUserError(f"User {email} already exists") from e

        await self.session.refresh(user)
        logger.info(f"Created user {user.id} ({user.email})")
        return user

    async def authenticate(self, email: str, password: str) -> User | None:
        """Return the user when the credentials match, otherwise None.

        Unknown email, social-only account and wrong password are not
        distinguishable to the caller and each cost one bcrypt verification.
        """
        user = await self.get_by_email(email)
        if not user:
            verify_password(password, None, self.settings)
            return None
        if not verify_password(password, user.password_hash, self.settings):
            return None
        return user

    async def update_name(self, user: User, name: str) -> User:
        user.name = name
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def create_social_user(
        self,
        email: str,
        name: str,
        provider: Literal["google", "facebook"],
        provider_id: str,
    ) -> User:
        """Get or create a password-less user for a social login."""
        user = await self.get_by_email(email)
        if user is None:
            user = await self.create_user(email=email, password=None, name=name)

        if provider == "google" and user.google_id != provider_id:
            user.google_id = provider_id
        elif provider == "facebook" and user.facebook_id != provider_id:
            user.facebook_id = provider_id
        await self.session.flush()
        await self.session.refresh(user)
        return user

    async def get_by_stripe_customer_id(self, customer_id: str) -> User | None:
        result = await self.session.execute(
            select(User).where(User.stripe_customer_id == customer_id)
        )
        return result.scalars().first()
