"""Tenant resolution: map an authenticated user to their organization."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Organization, User

logger = logging.getLogger(__name__)


def default_organization_name(user_name: str) -> str:
    return f"{user_name}'s Organization"


class OrganizationService:
    """Service for organization lookup and lazy creation."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def list_for_owner(self, owner_id: int) -> list[Organization]:
        result = await self.session.execute(
            select(Organization)
            .where(Organization.owner_id == owner_id)
            .order_by(Organization.id)
        )
        return list(result.scalars().all())

    async def owned_ids(self, owner_id: int) -> set[int]:
        result = await self.session.execute(
            select(Organization.id).where(Organization.owner_id == owner_id)
        )
        return set(result.scalars().all())

    async def create(self, name: str, owner_id: int) -> Organization:
        """Insert an organization inside a savepoint.

        Raises:
            IntegrityError: If the owner already has one
        """
        org = Organization(name=name, owner_id=owner_id, settings={})
        async with self.session.begin_nested():
            self.session.add(org)
        await self.session.refresh(org)
        logger.info(f"Created organization {org.id} for user {owner_id}")
        return org

    async def resolve_for_user(self, user: User) -> Organization:
        """Return the user's organization, creating it on first use.

        Lookup-or-create is atomic: if a concurrent request inserted the
        organization between our select and insert, the unique owner
        constraint rejects ours and we return the winner's row. On SQLite
        the transaction already holds the write lock, so the second request
        waits and then finds the first one's row.
        """
        organizations = await self.list_for_owner(user.id)
        if organizations:
            return organizations[0]

        try:
            return await self.create(default_organization_name(user.name), user.id)
        except IntegrityError:
            logger.info(f"Organization for user {user.id} created concurrently, reusing it")
            organizations = await self.list_for_owner(user.id)
            if not organizations:
                raise
            return organizations[0]

    async def resolve_id_for_user(self, user: User) -> int:
        org = await self.resolve_for_user(user)
        return org.id
