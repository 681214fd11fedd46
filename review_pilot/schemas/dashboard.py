"""Pydantic schemas for dashboard analytics."""

from pydantic import Field

from .base import ReviewPilotBaseModel
from .reviews import ReviewSummary


class SentimentBreakdown(ReviewPilotBaseModel):
    positive: int = 0
    neutral: int = 0
    negative: int = 0


class DashboardStats(ReviewPilotBaseModel):
    total_reviews: int = Field(alias="totalReviews")
    pending_responses: int = Field(alias="pendingResponses")
    average_rating: float = Field(alias="averageRating")
    sentiment_breakdown: SentimentBreakdown = Field(alias="sentimentBreakdown")
    recent_reviews: list[ReviewSummary] = Field(alias="recentReviews")
