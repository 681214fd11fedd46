"""Pydantic schemas for subscriptions and billing status."""

from datetime import datetime

from pydantic import Field

from ..models import BillingSubscriptionStatus, PlanType, SubscriptionStatus
from .base import ReviewPilotBaseModel


class SubscriptionResponse(ReviewPilotBaseModel):
    id: int
    plan_type: PlanType
    status: BillingSubscriptionStatus
    current_period_start: datetime | None = None
    current_period_end: datetime | None = None
    cancel_at_period_end: bool = False


class BillingStatusResponse(ReviewPilotBaseModel):
    subscription_status: SubscriptionStatus = Field(alias="subscriptionStatus")
    trial_active: bool = Field(alias="trialActive")
    trial_days_remaining: int = Field(alias="trialDaysRemaining")
    subscription: SubscriptionResponse | None = None


class WebhookAck(ReviewPilotBaseModel):
    received: bool = True
    handled: bool
