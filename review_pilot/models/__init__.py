"""SQLAlchemy ORM Models for Review Pilot."""

from .base import Base, IntegerIDMixin, TimestampMixin, as_utc, utcnow
from .models import (
    # Enums
    BillingStatus,
    BillingSubscriptionStatus,
    PlanType,
    Platform,
    ReviewStatus,
    Sentiment,
    SubscriptionPlan,
    SubscriptionStatus,
    UserRole,
    # Tenancy
    Organization,
    User,
    # Reviews
    Review,
    # Billing
    Subscription,
)

__all__ = [
    # Base
    "Base",
    "IntegerIDMixin",
    "TimestampMixin",
    "as_utc",
    "utcnow",
    # Enums
    "BillingStatus",
    "BillingSubscriptionStatus",
    "PlanType",
    "Platform",
    "ReviewStatus",
    "Sentiment",
    "SubscriptionPlan",
    "SubscriptionStatus",
    "UserRole",
    # Tenancy
    "Organization",
    "User",
    # Reviews
    "Review",
    # Billing
    "Subscription",
]
