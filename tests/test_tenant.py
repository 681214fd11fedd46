"""Tests for organization resolution (one organization per user)."""

import asyncio

import pytest
from sqlalchemy import func, select
from sqlalchemy.exc import IntegrityError

from review_pilot.core import Settings, close_db, init_db
from review_pilot.models import Organization
from review_pilot.services import OrganizationService, UserService


@pytest.fixture
async def user(session):
    return await UserService(session).create_user("tenant@example.com", "Password123", "Robin")


async def org_count(session, owner_id: int) -> int:
    result = await session.execute(
        select(func.count()).select_from(Organization).where(Organization.owner_id == owner_id)
    )
    return result.scalar_one()


class TestResolveForUser:
    async def test_creates_named_organization_on_first_use(self, session, user):
        org = await OrganizationService(session).resolve_for_user(user)

        assert org.owner_id == user.id
        assert org.name == "Robin's Organization"
        assert org.settings == {}

    async def test_is_idempotent(self, session, user):
        service = OrganizationService(session)

        first = await service.resolve_for_user(user)
        second = await service.resolve_for_user(user)
        third_id = await service.resolve_id_for_user(user)

        assert first.id == second.id == third_id
        assert await org_count(session, user.id) == 1

    async def test_second_organization_for_owner_is_rejected(self, session, user):
        service = OrganizationService(session)
        await service.create("First", user.id)

        with pytest.raises(IntegrityError):
            await service.create("Second", user.id)

        # Savepoint rolled back; the session is still usable
        assert await org_count(session, user.id) == 1

    async def test_lost_race_returns_the_winner(self, session, user, monkeypatch):
        service = OrganizationService(session)
        winner = await service.create("Created elsewhere", user.id)

        real_list = service.list_for_owner
        calls = {"n": 0}

        async def stale_first_read(owner_id):
            calls["n"] += 1
            if calls["n"] == 1:
                return []
            return await real_list(owner_id)

        monkeypatch.setattr(service, "list_for_owner", stale_first_read)

        org = await service.resolve_for_user(user)

        assert org.id == winner.id
        assert await org_count(session, user.id) == 1

    async def test_users_get_separate_organizations(self, session, user):
        other = await UserService(session).create_user("other@example.com", "Password123", "Sky")
        service = OrganizationService(session)

        mine = await service.resolve_for_user(user)
        theirs = await service.resolve_for_user(other)

        assert mine.id != theirs.id
        assert await service.owned_ids(user.id) == {mine.id}


# =============================================================================
# TEST: CONCURRENT REQUESTS ON A FILE DATABASE
# =============================================================================


class TestConcurrentResolution:
    @pytest.fixture
    async def file_db(self, tmp_path):
        db = await init_db(Settings(environment="test", database_url=f"sqlite:///{tmp_path / 'race.db'}"))
        yield db
        await close_db(db)

    async def test_parallel_first_requests_share_one_organization(self, file_db):
        async with file_db.session_scope() as s:
            user = await UserService(s).create_user("race@example.com", "Password123", "Racer")

        async def resolve_in_own_transaction() -> int:
            async with file_db.session_scope() as s:
                return await OrganizationService(s).resolve_id_for_user(user)

        first, second = await asyncio.gather(
            resolve_in_own_transaction(),
            resolve_in_own_transaction(),
        )

        assert first == second
        async with file_db.session_scope() as s:
            assert await org_count(s, user.id) == 1

    async def test_many_parallel_requests(self, file_db):
        async with file_db.session_scope() as s:
            user = await UserService(s).create_user("crowd@example.com", "Password123", "Crowd")

        async def resolve_in_own_transaction() -> int:
            async with file_db.session_scope() as s:
                return await OrganizationService(s).resolve_id_for_user(user)

        ids = await asyncio.gather(*(resolve_in_own_transaction() for _ in range(8)))

        assert len(set(ids)) == 1
        async with file_db.session_scope() as s:
            assert await org_count(s, user.id) == 1
