"""Subscription service: paid plans synced from Stripe events."""

import logging
from datetime import datetime

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import (
    BillingSubscriptionStatus,
    PlanType,
    Subscription,
    SubscriptionStatus,
    User,
)

logger = logging.getLogger(__name__)

# Stripe subscription.status -> our subscriptions.status
STRIPE_STATUS_MAP = {
    "active": BillingSubscriptionStatus.ACTIVE,
    "trialing": BillingSubscriptionStatus.ACTIVE,
    "canceled": BillingSubscriptionStatus.CANCELLED,
    "past_due": BillingSubscriptionStatus.PAST_DUE,
    "unpaid": BillingSubscriptionStatus.UNPAID,
    "incomplete": BillingSubscriptionStatus.UNPAID,
    "incomplete_expired": BillingSubscriptionStatus.CANCELLED,
}


def account_status_for(status: BillingSubscriptionStatus) -> SubscriptionStatus:
    """Status mirrored onto the user row for feature gating."""
    if status == BillingSubscriptionStatus.ACTIVE:
        return SubscriptionStatus.ACTIVE
    if status == BillingSubscriptionStatus.CANCELLED:
        return SubscriptionStatus.CANCELLED
    return SubscriptionStatus.EXPIRED


class SubscriptionService:
    """Service for subscription rows."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def create(
        self,
        user_id: int,
        stripe_subscription_id: str | None,
        plan_type: PlanType | str,
        current_period_end: datetime | None = None,
        stripe_customer_id: str | None = None,
        current_period_start: datetime | None = None,
    ) -> Subscription:
        subscription = Subscription(
            user_id=user_id,
            stripe_subscription_id=stripe_subscription_id,
            stripe_customer_id=stripe_customer_id,
            plan_type=PlanType(plan_type),
            status=BillingSubscriptionStatus.ACTIVE,
            current_period_start=current_period_start,
            current_period_end=current_period_end,
        )
        self.session.add(subscription)
        await self.session.flush()
        await self.session.refresh(subscription)
        return subscription

    async def get_active_for_user(self, user_id: int) -> Subscription | None:
        result = await self.session.execute(
            select(Subscription)
            .where(
                Subscription.user_id == user_id,
                Subscription.status == BillingSubscriptionStatus.ACTIVE,
            )
            .order_by(Subscription.id.desc())
            .limit(1)
        )
        return result.scalar_one_or_none()

    async def get_by_stripe_id(self, stripe_subscription_id: str) -> Subscription | None:
        result = await self.session.execute(
            select(Subscription).where(
                Subscription.stripe_subscription_id == stripe_subscription_id
            )
        )
        return result.scalar_one_or_none()

    async def update_status(
        self,
        stripe_subscription_id: str,
        status: BillingSubscriptionStatus | str,
    ) -> Subscription | None:
        subscription = await self.get_by_stripe_id(stripe_subscription_id)
        if subscription is None:
            return None
        subscription.status = BillingSubscriptionStatus(status)
        await self.session.flush()
        return subscription

    async def sync_from_stripe(
        self,
        user: User,
        stripe_subscription_id: str,
        stripe_status: str,
        plan_type: PlanType | str,
        stripe_customer_id: str | None = None,
        current_period_start: datetime | None = None,
        current_period_end: datetime | None = None,
        cancel_at_period_end: bool = False,
    ) -> Subscription:
        """Upsert the subscription row and mirror its state onto the user."""
        status = STRIPE_STATUS_MAP.get(stripe_status, BillingSubscriptionStatus.UNPAID)

        subscription = await self.get_by_stripe_id(stripe_subscription_id)
        if subscription is None:
            subscription = await self.create(
                user_id=user.id,
                stripe_subscription_id=stripe_subscription_id,
                plan_type=plan_type,
                stripe_customer_id=stripe_customer_id,
                current_period_start=current_period_start,
                current_period_end=current_period_end,
            )

        subscription.status = status
        subscription.plan_type = PlanType(plan_type)
        subscription.cancel_at_period_end = cancel_at_period_end
        subscription.current_period_start = current_period_start
        subscription.current_period_end = current_period_end

        user.subscription_status = account_status_for(status)
        if stripe_customer_id and not user.stripe_customer_id:
            user.stripe_customer_id = stripe_customer_id

        await self.session.flush()
        await self.session.refresh(subscription)
        logger.info(
            f"Subscription {stripe_subscription_id} for user {user.id} is now {status.value}"
        )
        return subscription
