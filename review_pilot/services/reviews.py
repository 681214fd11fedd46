"""Review service: tenant-scoped review storage and queries.

Every read or write that takes a review id goes through ``get_owned``,
which separates "does not exist" from "exists but belongs to another
tenant" so handlers can answer 404 or 403.
"""

import logging
from typing import Any

from sqlalchemy import case, func, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import (
    Platform,
    Review,
    ReviewStatus,
    Sentiment,
    User,
    utcnow,
)
from ..schemas.reviews import ReviewCreate, ReviewSummary, ReviewUpdate
from ..schemas.dashboard import DashboardStats, SentimentBreakdown
from .errors import DuplicateReviewError, ReviewAccessDeniedError, ReviewNotFoundError
from .organizations import OrganizationService

logger = logging.getLogger(__name__)

DEFAULT_AUTHOR_NAME = "Anonymous"
RECENT_REVIEWS_LIMIT = 5


class ReviewService:
    """Service for managing reviews within an organization."""

    def __init__(self, session: AsyncSession):
        self.session = session

    # =========================================================================
    # LOOKUP
    # =========================================================================

    async def get(self, review_id: int) -> Review | None:
        return await self.session.get(Review, review_id)

    async def get_owned(self, review_id: int, user: User) -> Review:
        """Load a review the user is allowed to touch.

        Raises:
            ReviewNotFoundError: If no review has this id
            ReviewAccessDeniedError: If it belongs to an organization the user does not own
        """
        review = await self.get(review_id)
        if review is None:
            raise ReviewNotFoundError(f"Review {review_id} not found")

        owned = await OrganizationService(self.session).owned_ids(user.id)
        if review.organization_id not in owned:
            logger.warning(
                f"User {user.id} denied access to review {review_id} "
                f"of organization {review.organization_id}"
            )
            raise ReviewAccessDeniedError(f"Review {review_id} is not accessible")
        return review

    async def exists(self, organization_id: int, platform: Platform | str, review_id: str) -> bool:
        result = await self.session.execute(
            select(Review.id).where(
                Review.organization_id == organization_id,
                Review.platform == Platform(platform),
                Review.review_id == review_id,
            )
        )
        return result.scalar_one_or_none() is not None

    # =========================================================================
    # CREATE
    # =========================================================================

    async def create(self, organization_id: int, data: ReviewCreate) -> Review:
        """Store a new review with server defaults applied.

        Raises:
            DuplicateReviewError: If the (organization, platform, review_id) triple exists
        """
        review = Review(
            organization_id=organization_id,
            platform=Platform(data.platform),
            review_id=data.review_id,
            rating=data.rating,
            text=data.text if data.text is not None else "",
            author_name=data.author_name or DEFAULT_AUTHOR_NAME,
            author_avatar=data.author_avatar,
            sentiment=Sentiment(data.sentiment) if data.sentiment else Sentiment.NEUTRAL,
            sentiment_score=data.sentiment_score,
            topics=data.topics if data.topics is not None else "",
            status=ReviewStatus.PENDING,
            review_date=data.review_date or utcnow(),
        )

        try:
            async with self.session.begin_nested():
                self.session.add(review)
        except IntegrityError:
            # The unique triple is the only constraint input validation cannot rule out
            if await self.exists(organization_id, data.platform, data.review_id):
                raise DuplicateReviewError(
                    "Review already exists for this platform and review ID"
                ) from None
            raise

        await self.session.refresh(review)
        logger.info(
            f"Created review {review.id} ({review.platform.value}/{review.review_id}) "
            f"in organization {organization_id}"
        )
        return review

    # =========================================================================
    # LIST
    # =========================================================================

    async def list_reviews(
        self,
        organization_id: int,
        limit: int,
        offset: int,
        platform: Platform | str | None = None,
        status: ReviewStatus | str | None = None,
        sentiment: Sentiment | str | None = None,
    ) -> tuple[list[Review], int]:
        """Newest-first page of reviews plus the total matching count."""
        conditions = [Review.organization_id == organization_id]
        if platform:
            conditions.append(Review.platform == Platform(platform))
        if status:
            conditions.append(Review.status == ReviewStatus(status))
        if sentiment:
            conditions.append(Review.sentiment == Sentiment(sentiment))

        total = (
            await self.session.execute(
                select(func.count()).select_from(Review).where(*conditions)
            )
        ).scalar_one()

        result = await self.session.execute(
            select(Review)
            .where(*conditions)
            .order_by(Review.created_at.desc(), Review.id.desc())
            .limit(limit)
            .offset(offset)
        )
        return list(result.scalars().all()), total

    # =========================================================================
    # UPDATE
    # =========================================================================

    async def update_response(
        self,
        review: Review,
        response_draft: str | None = None,
        status: ReviewStatus | str | None = None,
    ) -> Review:
        """Set draft and/or status; a None argument keeps the stored value."""
        if response_draft is not None:
            review.response_draft = response_draft
        if status is not None:
            review.status = ReviewStatus(status)
        await self.session.flush()
        return review

    async def update_sentiment(
        self,
        review: Review,
        sentiment: Sentiment | str | None = None,
        sentiment_score: float | None = None,
        topics: str | None = None,
    ) -> Review:
        """Set sentiment fields; a None argument keeps the stored value."""
        if sentiment is not None:
            review.sentiment = Sentiment(sentiment)
        if sentiment_score is not None:
            review.sentiment_score = sentiment_score
        if topics is not None:
            review.topics = topics
        await self.session.flush()
        return review

    async def apply_update(self, review: Review, data: ReviewUpdate) -> Review:
        if data.touches_response:
            await self.update_response(review, data.response_draft, data.status)
        if data.touches_sentiment:
            await self.update_sentiment(
                review, data.sentiment, data.sentiment_score, data.topics
            )
        await self.session.refresh(review)
        return review

    # =========================================================================
    # DELETE
    # =========================================================================

    async def delete(self, review: Review) -> None:
        review_id = review.id
        await self.session.delete(review)
        await self.session.flush()
        logger.info(f"Deleted review {review_id}")

    # =========================================================================
    # ANALYTICS
    # =========================================================================

    async def recent(self, organization_id: int, limit: int = RECENT_REVIEWS_LIMIT) -> list[Review]:
        reviews, _ = await self.list_reviews(organization_id, limit=limit, offset=0)
        return reviews

    async def stats(self, organization_id: int) -> DashboardStats:
        """Aggregate counts, average rating and sentiment split."""
        row = (
            await self.session.execute(
                select(
                    func.count(Review.id).label("total_reviews"),
                    func.avg(Review.rating).label("average_rating"),
                    func.sum(case((Review.status == ReviewStatus.PENDING, 1), else_=0)).label("pending"),
                    func.sum(case((Review.sentiment == Sentiment.POSITIVE, 1), else_=0)).label("positive"),
                    func.sum(case((Review.sentiment == Sentiment.NEUTRAL, 1), else_=0)).label("neutral"),
                    func.sum(case((Review.sentiment == Sentiment.NEGATIVE, 1), else_=0)).label("negative"),
                ).where(Review.organization_id == organization_id)
            )
        ).one()

        recent = await self.recent(organization_id)

        return DashboardStats(
            total_reviews=row.total_reviews or 0,
            pending_responses=row.pending or 0,
            average_rating=round(float(row.average_rating or 0), 1),
            sentiment_breakdown=SentimentBreakdown(
                positive=row.positive or 0,
                neutral=row.neutral or 0,
                negative=row.negative or 0,
            ),
            recent_reviews=[_to_summary(r) for r in recent],
        )


def _to_summary(review: Review) -> ReviewSummary:
    data: dict[str, Any] = {
        "id": review.id,
        "platform": review.platform,
        "rating": review.rating,
        "text": review.text,
        "author_name": review.author_name,
        "sentiment": review.sentiment or Sentiment.NEUTRAL,
        "created_at": review.created_at,
        "status": review.status,
    }
    return ReviewSummary(**data)
