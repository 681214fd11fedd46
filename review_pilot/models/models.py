"""SQLAlchemy ORM Models for Review Pilot.

Four tables: users, organizations, reviews, subscriptions. Every enumerated
column is stored as VARCHAR guarded by a CHECK constraint so the schema
behaves the same on SQLite and PostgreSQL.
"""

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import (
    JSON,
    Boolean,
    CheckConstraint,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    Text,
    UniqueConstraint,
)
from sqlalchemy.orm import Mapped, mapped_column, relationship

from .base import Base, IntegerIDMixin, TimestampMixin, enum_column


# =============================================================================
# ENUMS
# =============================================================================


class UserRole(str, PyEnum):
    USER = "user"
    MANAGER = "manager"
    ADMIN = "admin"


class SubscriptionStatus(str, PyEnum):
    """Account-level subscription state mirrored onto the user."""
    TRIAL = "trial"
    ACTIVE = "active"
    CANCELLED = "cancelled"
    EXPIRED = "expired"


class SubscriptionPlan(str, PyEnum):
    FREE = "free"
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class BillingStatus(str, PyEnum):
    ACTIVE = "active"
    PAST_DUE = "past_due"
    CANCELLED = "cancelled"
    UNPAID = "unpaid"


class Platform(str, PyEnum):
    GOOGLE = "google"
    YELP = "yelp"
    FACEBOOK = "facebook"
    TRIPADVISOR = "tripadvisor"
    TRUSTPILOT = "trustpilot"
    ZOMATO = "zomato"
    CSV = "csv"


class Sentiment(str, PyEnum):
    POSITIVE = "positive"
    NEGATIVE = "negative"
    NEUTRAL = "neutral"


class ReviewStatus(str, PyEnum):
    PENDING = "pending"
    RESPONDED = "responded"
    IGNORED = "ignored"
    FLAGGED = "flagged"


class PlanType(str, PyEnum):
    """Paid plans only; the free tier has no subscription row."""
    STARTER = "starter"
    PROFESSIONAL = "professional"
    ENTERPRISE = "enterprise"


class BillingSubscriptionStatus(str, PyEnum):
    ACTIVE = "active"
    CANCELLED = "cancelled"
    PAST_DUE = "past_due"
    UNPAID = "unpaid"


# =============================================================================
# USER & ORGANIZATION MODELS
# =============================================================================


class User(Base, IntegerIDMixin, TimestampMixin):
    """Application user. Social-login users have no password hash."""

    __tablename__ = "users"

    email: Mapped[str] = mapped_column(String(255), unique=True, nullable=False)
    password_hash: Mapped[str | None] = mapped_column(String(255))
    name: Mapped[str] = mapped_column(String(255), nullable=False)
    role: Mapped[UserRole] = mapped_column(
        enum_column(UserRole, "user_role"),
        default=UserRole.USER,
        nullable=False,
    )
    subscription_status: Mapped[SubscriptionStatus] = mapped_column(
        enum_column(SubscriptionStatus, "subscription_status"),
        default=SubscriptionStatus.TRIAL,
        nullable=False,
    )
    trial_end_date: Mapped[datetime | None] = mapped_column()
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255))
    google_id: Mapped[str | None] = mapped_column(String(255))
    facebook_id: Mapped[str | None] = mapped_column(String(255))

    # Relationships
    organizations: Mapped[list["Organization"]] = relationship(
        back_populates="owner", cascade="all, delete-orphan", passive_deletes=True
    )
    subscriptions: Mapped[list["Subscription"]] = relationship(
        back_populates="user", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        Index("idx_users_email", "email"),
        Index("idx_users_stripe_customer", "stripe_customer_id"),
        Index("idx_users_trial_end", "trial_end_date"),
    )


class Organization(Base, IntegerIDMixin, TimestampMixin):
    """Tenant: the billing and data-ownership boundary for reviews."""

    __tablename__ = "organizations"

    name: Mapped[str] = mapped_column(String(255), nullable=False)
    owner_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    subscription_plan: Mapped[SubscriptionPlan] = mapped_column(
        enum_column(SubscriptionPlan, "subscription_plan"),
        default=SubscriptionPlan.FREE,
        nullable=False,
    )
    billing_status: Mapped[BillingStatus] = mapped_column(
        enum_column(BillingStatus, "billing_status"),
        default=BillingStatus.ACTIVE,
        nullable=False,
    )
    settings: Mapped[dict] = mapped_column(JSON, default=dict, nullable=False)

    # Relationships
    owner: Mapped["User"] = relationship(back_populates="organizations")
    reviews: Mapped[list["Review"]] = relationship(
        back_populates="organization", cascade="all, delete-orphan", passive_deletes=True
    )

    __table_args__ = (
        # One organization per owner; makes lazy creation race-safe
        UniqueConstraint("owner_id"),
        Index("idx_organizations_owner", "owner_id"),
    )


# =============================================================================
# REVIEW MODELS (Core)
# =============================================================================


class Review(Base, IntegerIDMixin, TimestampMixin):
    """A customer review ingested from one platform.

    review_date is when the customer wrote it; created_at/updated_at track
    the row itself.
    """

    __tablename__ = "reviews"

    organization_id: Mapped[int] = mapped_column(
        ForeignKey("organizations.id", ondelete="CASCADE"), nullable=False
    )
    platform: Mapped[Platform] = mapped_column(
        enum_column(Platform, "platform"), nullable=False
    )
    review_id: Mapped[str] = mapped_column(String(255), nullable=False)
    rating: Mapped[int] = mapped_column(Integer, nullable=False)
    text: Mapped[str | None] = mapped_column(Text)
    author_name: Mapped[str | None] = mapped_column(String(255))
    author_avatar: Mapped[str | None] = mapped_column(String(500))
    sentiment: Mapped[Sentiment | None] = mapped_column(enum_column(Sentiment, "sentiment"))
    sentiment_score: Mapped[float | None] = mapped_column(Float)
    topics: Mapped[str | None] = mapped_column(Text)
    entities: Mapped[str | None] = mapped_column(Text)
    response_draft: Mapped[str | None] = mapped_column(Text)
    response_published: Mapped[str | None] = mapped_column(Text)
    status: Mapped[ReviewStatus] = mapped_column(
        enum_column(ReviewStatus, "review_status"),
        default=ReviewStatus.PENDING,
        nullable=False,
    )
    review_date: Mapped[datetime | None] = mapped_column()

    # Relationships
    organization: Mapped["Organization"] = relationship(back_populates="reviews")

    __table_args__ = (
        UniqueConstraint("organization_id", "platform", "review_id"),
        CheckConstraint("rating >= 1 AND rating <= 5", name="rating_range"),
        CheckConstraint(
            "sentiment_score IS NULL OR (sentiment_score >= -1 AND sentiment_score <= 1)",
            name="sentiment_score_range",
        ),
        Index("idx_reviews_organization", "organization_id"),
        Index("idx_reviews_platform", "platform"),
        Index("idx_reviews_status", "status"),
    )


# =============================================================================
# BILLING MODELS
# =============================================================================


class Subscription(Base, IntegerIDMixin, TimestampMixin):
    """Paid subscription synced from Stripe."""

    __tablename__ = "subscriptions"

    user_id: Mapped[int] = mapped_column(
        ForeignKey("users.id", ondelete="CASCADE"), nullable=False
    )
    stripe_subscription_id: Mapped[str | None] = mapped_column(String(255), unique=True)
    stripe_customer_id: Mapped[str | None] = mapped_column(String(255))
    plan_type: Mapped[PlanType] = mapped_column(
        enum_column(PlanType, "plan_type"), nullable=False
    )
    status: Mapped[BillingSubscriptionStatus] = mapped_column(
        enum_column(BillingSubscriptionStatus, "billing_subscription_status"),
        default=BillingSubscriptionStatus.ACTIVE,
        nullable=False,
    )
    current_period_start: Mapped[datetime | None] = mapped_column()
    current_period_end: Mapped[datetime | None] = mapped_column()
    cancel_at_period_end: Mapped[bool] = mapped_column(Boolean, default=False, nullable=False)

    # Relationships
    user: Mapped["User"] = relationship(back_populates="subscriptions")

    __table_args__ = (
        Index("idx_subscriptions_user", "user_id"),
        Index("idx_subscriptions_stripe", "stripe_subscription_id"),
    )
