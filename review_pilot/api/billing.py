"""Billing API: Stripe subscription webhook and the caller's billing status."""

import json
import logging
from datetime import datetime, timezone

import stripe
from fastapi import APIRouter, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from ..core import (
    CurrentUserDep,
    SessionDep,
    SettingsDep,
    get_trial_days_remaining,
    is_trial_active,
)
from ..models import PlanType, User
from ..schemas import BillingStatusResponse, SubscriptionResponse, WebhookAck
from ..services import SubscriptionService, UserService

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/billing", tags=["billing"])

SUBSCRIPTION_EVENTS = {
    "customer.subscription.created",
    "customer.subscription.updated",
    "customer.subscription.deleted",
}


# =============================================================================
# HELPERS
# =============================================================================


def _timestamp(value: int | None) -> datetime | None:
    if value is None:
        return None
    return datetime.fromtimestamp(value, tz=timezone.utc)


def _plan_type(subscription: dict) -> PlanType:
    """Plan from the subscription metadata, falling back to the price lookup key."""
    plan = (subscription.get("metadata") or {}).get("plan_type")
    if not plan:
        items = (subscription.get("items") or {}).get("data") or []
        if items:
            plan = (items[0].get("price") or {}).get("lookup_key")
    try:
        return PlanType(plan)
    except ValueError:
        logger.warning(f"Unknown plan '{plan}' on subscription {subscription.get('id')}, using starter")
        return PlanType.STARTER


async def _find_user(session: AsyncSession, subscription: dict) -> User | None:
    users = UserService(session)
    user_id = (subscription.get("metadata") or {}).get("user_id")
    if user_id and str(user_id).isdigit():
        user = await users.get_by_id(int(user_id))
        if user:
            return user
    customer_id = subscription.get("customer")
    if customer_id:
        return await users.get_by_stripe_customer_id(customer_id)
    return None


# =============================================================================
# WEBHOOK
# =============================================================================


@router.post("/webhook", response_model=WebhookAck)
async def stripe_webhook(
    request: Request,
    session: SessionDep,
    settings: SettingsDep,
    stripe_signature: str | None = Header(default=None, alias="Stripe-Signature"),
):
    """Apply Stripe subscription lifecycle events."""
    if not settings.stripe_enabled:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Billing is not configured",
        )
    if not stripe_signature:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Missing Stripe signature")

    payload = await request.body()
    try:
        stripe.Webhook.construct_event(payload, stripe_signature, settings.stripe_webhook_secret)
    except (ValueError, stripe.SignatureVerificationError) as e:
        logger.warning(f"Webhook verification failed: {type(e).__name__}")
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid signature")

    # Verified; work on plain dicts from here on
    event = json.loads(payload)
    event_type = event.get("type")
    if event_type not in SUBSCRIPTION_EVENTS:
        logger.debug(f"Ignoring Stripe event {event_type}")
        return WebhookAck(handled=False)

    subscription = event.get("data", {}).get("object", {})
    user = await _find_user(session, subscription)
    if user is None:
        logger.warning(f"No user for Stripe subscription {subscription.get('id')}")
        return WebhookAck(handled=False)

    stripe_status = "canceled" if event_type == "customer.subscription.deleted" else subscription.get("status", "")
    await SubscriptionService(session).sync_from_stripe(
        user,
        stripe_subscription_id=subscription["id"],
        stripe_status=stripe_status,
        plan_type=_plan_type(subscription),
        stripe_customer_id=subscription.get("customer"),
        current_period_start=_timestamp(subscription.get("current_period_start")),
        current_period_end=_timestamp(subscription.get("current_period_end")),
        cancel_at_period_end=bool(subscription.get("cancel_at_period_end")),
    )
    return WebhookAck(handled=True)


# =============================================================================
# STATUS
# =============================================================================


@router.get("/subscription", response_model=BillingStatusResponse)
async def get_subscription(user: CurrentUserDep, session: SessionDep):
    """The caller's active subscription (if any) and trial state."""
    subscription = await SubscriptionService(session).get_active_for_user(user.id)
    return BillingStatusResponse(
        subscription_status=user.subscription_status,
        trial_active=is_trial_active(user),
        trial_days_remaining=get_trial_days_remaining(user),
        subscription=SubscriptionResponse.model_validate(subscription) if subscription else None,
    )
