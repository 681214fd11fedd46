"""Tests for dashboard statistics and fixture seeding."""

import pytest
from sqlalchemy import func, select

from review_pilot.core import Settings
from review_pilot.models import Organization, Review, User
from review_pilot.services import TEST_CREDENTIALS, seed_database


async def add_review(client, headers, review_id: str, rating: int, sentiment: str | None = None) -> dict:
    payload = {"platform": "google", "review_id": review_id, "rating": rating, "text": f"Review {review_id}"}
    if sentiment:
        payload["sentiment"] = sentiment
    response = await client.post("/reviews", json=payload, headers=headers)
    assert response.status_code == 201
    return response.json()["review"]


# =============================================================================
# TEST: DASHBOARD
# =============================================================================


class TestDashboardStats:
    async def test_empty_organization(self, client, signup_user):
        owner = await signup_user()

        response = await client.get("/dashboard/stats", headers=owner["headers"])

        assert response.status_code == 200
        assert response.json() == {
            "totalReviews": 0,
            "pendingResponses": 0,
            "averageRating": 0,
            "sentimentBreakdown": {"positive": 0, "neutral": 0, "negative": 0},
            "recentReviews": [],
        }

    async def test_aggregates(self, client, signup_user):
        owner = await signup_user()
        await add_review(client, owner["headers"], "a", 5, "positive")
        await add_review(client, owner["headers"], "b", 4, "positive")
        await add_review(client, owner["headers"], "c", 2, "negative")
        responded = await add_review(client, owner["headers"], "d", 3)
        await client.put(f"/reviews/{responded['id']}", json={"status": "responded"}, headers=owner["headers"])

        stats = (await client.get("/dashboard/stats", headers=owner["headers"])).json()

        assert stats["totalReviews"] == 4
        assert stats["pendingResponses"] == 3
        assert stats["averageRating"] == 3.5
        assert stats["sentimentBreakdown"] == {"positive": 2, "neutral": 1, "negative": 1}

    async def test_average_is_rounded_to_one_decimal(self, client, signup_user):
        owner = await signup_user()
        for review_id, rating in (("a", 5), ("b", 4), ("c", 4)):
            await add_review(client, owner["headers"], review_id, rating)

        stats = (await client.get("/dashboard/stats", headers=owner["headers"])).json()

        assert stats["averageRating"] == 4.3

    async def test_recent_reviews_are_latest_five(self, client, signup_user):
        owner = await signup_user()
        for i in range(7):
            await add_review(client, owner["headers"], f"r{i}", 4)

        recent = (await client.get("/dashboard/stats", headers=owner["headers"])).json()["recentReviews"]

        assert [r["text"] for r in recent] == [f"Review r{i}" for i in (6, 5, 4, 3, 2)]
        assert set(recent[0]) == {"id", "platform", "rating", "text", "author_name", "sentiment", "created_at", "status"}

    async def test_stats_are_tenant_scoped(self, client, signup_user):
        owner = await signup_user()
        stranger = await signup_user()
        await add_review(client, owner["headers"], "a", 5)

        stats = (await client.get("/dashboard/stats", headers=stranger["headers"])).json()

        assert stats["totalReviews"] == 0


# =============================================================================
# TEST: SEEDING
# =============================================================================


class TestSeedDatabase:
    async def test_seed_creates_fixtures(self, session):
        result = await seed_database(session)

        assert result.users_created == ["john.smith@example.com", "admin@example.com"]
        assert result.reviews_created == ["google_001", "yelp_001", "fb_001", "ta_001"]
        assert (await session.execute(select(func.count()).select_from(Organization))).scalar_one() == 2

    async def test_seed_is_idempotent(self, session):
        await seed_database(session)

        again = await seed_database(session)

        assert again.users_created == []
        assert again.reviews_created == []
        assert (await session.execute(select(func.count()).select_from(User))).scalar_one() == 2
        assert (await session.execute(select(func.count()).select_from(Review))).scalar_one() == 4

    async def test_seeded_users_can_log_in(self, client):
        await client.post("/seed")

        for role, creds in TEST_CREDENTIALS.items():
            response = await client.post("/auth/login", json=creds)
            assert response.status_code == 200, role
            assert response.json()["user"]["role"] == role

    async def test_seed_endpoint_reports_credentials(self, client):
        response = await client.post("/seed")

        assert response.status_code == 200
        body = response.json()
        assert body["success"] is True
        assert body["testCredentials"] == TEST_CREDENTIALS
        assert body["reviewsCreated"] == 4


class TestSeedInProduction:
    @pytest.fixture
    def settings(self) -> Settings:
        return Settings(environment="production", database_url="sqlite:///:memory:")

    async def test_seed_is_forbidden(self, client, session):
        response = await client.post("/seed")

        assert response.status_code == 403
        assert (await session.execute(select(func.count()).select_from(User))).scalar_one() == 0
