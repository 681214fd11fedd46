"""Tests for trial gating and the Stripe subscription webhook."""

import hashlib
import hmac
import json
import time
from datetime import datetime, timedelta, timezone

import pytest

from review_pilot.core import Settings
from review_pilot.core.billing import (
    can_access_feature,
    get_trial_days_remaining,
    is_trial_active,
    needs_upgrade,
)
from review_pilot.core.config import get_plan_config, get_plan_limits
from review_pilot.models import SubscriptionStatus, User
from review_pilot.services import SubscriptionService, UserService

WEBHOOK_SECRET = "whsec_test_secret"
NOW = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)


def make_user(status: SubscriptionStatus, trial_end: datetime | None) -> User:
    return User(email="u@example.com", name="U", subscription_status=status, trial_end_date=trial_end)


# =============================================================================
# TEST: TRIAL AND FEATURE GATING
# =============================================================================


class TestTrialGating:
    def test_active_trial_unlocks_everything(self):
        user = make_user(SubscriptionStatus.TRIAL, NOW + timedelta(days=3))

        assert is_trial_active(user, NOW)
        assert can_access_feature(user, "ai_response", NOW)
        assert not needs_upgrade(user, NOW)

    @pytest.mark.parametrize("feature", ["priority_support", "api_access", "multi_location"])
    def test_active_trial_is_not_limited_to_a_feature_list(self, feature):
        user = make_user(SubscriptionStatus.TRIAL, NOW + timedelta(days=3))

        assert can_access_feature(user, feature, NOW)

    def test_days_remaining_rounds_up(self):
        user = make_user(SubscriptionStatus.TRIAL, NOW + timedelta(days=2, hours=1))

        assert get_trial_days_remaining(user, NOW) == 3

    def test_ended_trial_falls_back_to_free_features(self):
        user = make_user(SubscriptionStatus.TRIAL, NOW - timedelta(seconds=1))

        assert not is_trial_active(user, NOW)
        assert get_trial_days_remaining(user, NOW) == 0
        assert not can_access_feature(user, "ai_response", NOW)
        assert can_access_feature(user, "view_reviews", NOW)
        assert can_access_feature(user, "basic_analytics", NOW)
        assert needs_upgrade(user, NOW)

    def test_naive_trial_end_is_treated_as_utc(self):
        user = make_user(SubscriptionStatus.TRIAL, (NOW + timedelta(hours=1)).replace(tzinfo=None))

        assert is_trial_active(user, NOW)

    def test_active_subscription_unlocks_everything(self):
        user = make_user(SubscriptionStatus.ACTIVE, None)

        assert can_access_feature(user, "csv_import", NOW)
        assert not needs_upgrade(user, NOW)

    @pytest.mark.parametrize("status", [SubscriptionStatus.CANCELLED, SubscriptionStatus.EXPIRED])
    def test_lapsed_accounts_need_upgrade(self, status):
        user = make_user(status, NOW + timedelta(days=5))

        assert not is_trial_active(user, NOW)
        assert not can_access_feature(user, "ai_response", NOW)
        assert needs_upgrade(user, NOW)


class TestPlanCatalogue:
    def test_known_plan(self):
        plan = get_plan_config("professional")

        assert plan["price"] == 79
        assert "ai_response" in plan["features"]
        assert get_plan_limits("enterprise")["organizations"] == -1

    def test_unknown_plan_is_none(self):
        assert get_plan_config("platinum") is None
        assert get_plan_limits("platinum") is None


# =============================================================================
# TEST: SUBSCRIPTION SYNC
# =============================================================================


class TestSubscriptionSync:
    async def test_sync_upserts_and_mirrors_status(self, session):
        user = await UserService(session).create_user("paid@example.com", "Password123", "Paid")
        service = SubscriptionService(session)

        created = await service.sync_from_stripe(user, "sub_1", "active", "starter", stripe_customer_id="cus_1")
        updated = await service.sync_from_stripe(user, "sub_1", "past_due", "professional")

        assert created.id == updated.id
        assert updated.plan_type == "professional"
        assert user.subscription_status == SubscriptionStatus.EXPIRED
        assert user.stripe_customer_id == "cus_1"
        assert await service.get_active_for_user(user.id) is None

    async def test_cancel_maps_to_cancelled(self, session):
        user = await UserService(session).create_user("cancel@example.com", "Password123", "Cancel")
        service = SubscriptionService(session)

        await service.sync_from_stripe(user, "sub_2", "active", "starter")
        await service.sync_from_stripe(user, "sub_2", "canceled", "starter")

        assert user.subscription_status == SubscriptionStatus.CANCELLED


# =============================================================================
# TEST: WEBHOOK
# =============================================================================


def signed(payload: dict, secret: str = WEBHOOK_SECRET) -> tuple[bytes, dict]:
    body = json.dumps(payload).encode()
    timestamp = int(time.time())
    signature = hmac.new(secret.encode(), f"{timestamp}.".encode() + body, hashlib.sha256).hexdigest()
    return body, {"Stripe-Signature": f"t={timestamp},v1={signature}", "Content-Type": "application/json"}


def subscription_event(event_type: str, user_id: int, status: str = "active") -> dict:
    return {
        "id": "evt_1",
        "object": "event",
        "type": event_type,
        "data": {
            "object": {
                "id": "sub_123",
                "object": "subscription",
                "customer": "cus_123",
                "status": status,
                "cancel_at_period_end": False,
                "current_period_start": 1735689600,
                "current_period_end": 1738368000,
                "metadata": {"user_id": str(user_id), "plan_type": "professional"},
            }
        },
    }


class TestWebhookNotConfigured:
    async def test_returns_503(self, client):
        response = await client.post("/billing/webhook", content=b"{}")

        assert response.status_code == 503


class TestWebhook:
    @pytest.fixture
    def settings(self) -> Settings:
        return Settings(
            environment="test",
            database_url="sqlite:///:memory:",
            ai_response_delay_seconds=0,
            stripe_secret_key="sk_test_123",
            stripe_webhook_secret=WEBHOOK_SECRET,
        )

    async def test_bad_signature_is_400(self, client, signup_user):
        owner = await signup_user()
        body, headers = signed(subscription_event("customer.subscription.created", owner["user"]["id"]), secret="whsec_wrong")

        response = await client.post("/billing/webhook", content=body, headers=headers)

        assert response.status_code == 400

    async def test_missing_signature_is_400(self, client):
        response = await client.post("/billing/webhook", content=b"{}")

        assert response.status_code == 400

    async def test_subscription_lifecycle(self, client, signup_user):
        owner = await signup_user()
        user_id = owner["user"]["id"]

        body, headers = signed(subscription_event("customer.subscription.created", user_id))
        created = await client.post("/billing/webhook", content=body, headers=headers)

        assert created.status_code == 200
        assert created.json() == {"received": True, "handled": True}

        status = (await client.get("/billing/subscription", headers=owner["headers"])).json()
        assert status["subscriptionStatus"] == "active"
        assert status["subscription"]["plan_type"] == "professional"
        assert status["subscription"]["current_period_end"].startswith("2025-02-01")

        body, headers = signed(subscription_event("customer.subscription.deleted", user_id))
        await client.post("/billing/webhook", content=body, headers=headers)

        status = (await client.get("/billing/subscription", headers=owner["headers"])).json()
        assert status["subscriptionStatus"] == "cancelled"
        assert status["subscription"] is None
        assert status["trialActive"] is False

    async def test_unknown_event_is_acknowledged(self, client):
        body, headers = signed({"id": "evt_2", "object": "event", "type": "invoice.created", "data": {"object": {}}})

        response = await client.post("/billing/webhook", content=body, headers=headers)

        assert response.status_code == 200
        assert response.json() == {"received": True, "handled": False}


class TestSubscriptionStatusUpdate:
    async def test_update_status_by_external_id(self, session):
        user = await UserService(session).create_user("status@example.com", "Password123", "Status")
        service = SubscriptionService(session)
        await service.create(user.id, "sub_9", "enterprise")

        updated = await service.update_status("sub_9", "past_due")

        assert updated.status == "past_due"
        assert await service.update_status("sub_missing", "active") is None
