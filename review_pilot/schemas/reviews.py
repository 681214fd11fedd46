"""Pydantic schemas for reviews."""

from datetime import datetime, timezone

from pydantic import Field, field_validator

from ..models import Platform, ReviewStatus, Sentiment
from .base import Pagination, ReviewPilotBaseModel


class ReviewCreate(ReviewPilotBaseModel):
    """Ingest one review. (organization, platform, review_id) must be new."""

    platform: Platform
    review_id: str = Field(..., min_length=1, max_length=255)
    rating: int = Field(..., ge=1, le=5)
    text: str | None = None
    author_name: str | None = Field(default=None, max_length=255)
    author_avatar: str | None = Field(default=None, max_length=500)
    sentiment: Sentiment | None = None
    sentiment_score: float | None = Field(default=None, ge=-1, le=1)
    topics: str | None = None
    review_date: datetime | None = None

    @field_validator("review_date")
    @classmethod
    def normalize_review_date(cls, v: datetime | None) -> datetime | None:
        """Offsets are folded into UTC; naive values are taken as UTC."""
        if v is None:
            return None
        if v.tzinfo is None:
            return v.replace(tzinfo=timezone.utc)
        return v.astimezone(timezone.utc)


class ReviewUpdate(ReviewPilotBaseModel):
    """Partial update. Two independent groups; omitted fields keep their value.

    - response_draft + status
    - sentiment + sentiment_score + topics
    """

    response_draft: str | None = None
    status: ReviewStatus | None = None
    sentiment: Sentiment | None = None
    sentiment_score: float | None = Field(default=None, ge=-1, le=1)
    topics: str | None = None

    @property
    def touches_response(self) -> bool:
        return self.response_draft is not None or self.status is not None

    @property
    def touches_sentiment(self) -> bool:
        return (
            self.sentiment is not None
            or self.sentiment_score is not None
            or self.topics is not None
        )


class ReviewResponse(ReviewPilotBaseModel):
    """Full review row."""

    id: int
    organization_id: int
    platform: Platform
    review_id: str
    rating: int
    text: str | None = None
    author_name: str | None = None
    author_avatar: str | None = None
    sentiment: Sentiment | None = None
    sentiment_score: float | None = None
    topics: str | None = None
    entities: str | None = None
    response_draft: str | None = None
    response_published: str | None = None
    status: ReviewStatus
    review_date: datetime | None = None
    created_at: datetime
    updated_at: datetime


class ReviewListResponse(ReviewPilotBaseModel):
    reviews: list[ReviewResponse]
    pagination: Pagination


class ReviewEnvelope(ReviewPilotBaseModel):
    success: bool = True
    message: str | None = None
    review: ReviewResponse


class ReviewSummary(ReviewPilotBaseModel):
    """Compact review for dashboard listings."""

    id: int
    platform: Platform
    rating: int
    text: str | None = None
    author_name: str | None = None
    sentiment: Sentiment = Sentiment.NEUTRAL
    created_at: datetime
    status: ReviewStatus
