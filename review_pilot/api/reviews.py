"""API routes for review management.

Every route is scoped to the caller's organization. Single-review routes
answer 404 when the id is unknown and 403 when it belongs to another
organization.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status

from ..core import CurrentUserDep, OrganizationIdDep, SessionDep, SettingsDep
from ..models import Platform, Review, ReviewStatus, Sentiment
from ..schemas import (
    MessageResponse,
    Pagination,
    ReviewCreate,
    ReviewEnvelope,
    ReviewListResponse,
    ReviewResponse,
    ReviewUpdate,
)
from ..services import (
    DuplicateReviewError,
    ReviewAccessDeniedError,
    ReviewNotFoundError,
    ReviewService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/reviews", tags=["reviews"])


def get_review_service(session: SessionDep) -> ReviewService:
    return ReviewService(session)


ReviewServiceDep = Annotated[ReviewService, Depends(get_review_service)]


# =============================================================================
# HELPERS
# =============================================================================


async def load_owned_review(
    review_id: int,
    user: CurrentUserDep,
    service: ReviewServiceDep,
) -> Review:
    """Path dependency: the review, if the caller owns it."""
    try:
        return await service.get_owned(review_id, user)
    except ReviewNotFoundError:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Review not found",
        )
    except ReviewAccessDeniedError:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Access denied",
        )


OwnedReviewDep = Annotated[Review, Depends(load_owned_review)]


# =============================================================================
# COLLECTION
# =============================================================================


@router.get("", response_model=ReviewListResponse)
async def list_reviews(
    organization_id: OrganizationIdDep,
    service: ReviewServiceDep,
    settings: SettingsDep,
    page: int = Query(default=1, ge=1),
    limit: int = Query(default=20, ge=1, le=100),
    platform: Platform | None = Query(default=None),
    status_filter: ReviewStatus | None = Query(default=None, alias="status"),
    sentiment: Sentiment | None = Query(default=None),
):
    """Newest-first page of the organization's reviews."""
    limit = min(limit, settings.max_page_size)
    offset = (page - 1) * limit

    reviews, total = await service.list_reviews(
        organization_id,
        limit=limit,
        offset=offset,
        platform=platform,
        status=status_filter,
        sentiment=sentiment,
    )

    return ReviewListResponse(
        reviews=[ReviewResponse.model_validate(r) for r in reviews],
        pagination=Pagination(page=page, limit=limit, total=total),
    )


@router.post("", response_model=ReviewEnvelope, status_code=status.HTTP_201_CREATED)
async def create_review(
    data: ReviewCreate,
    organization_id: OrganizationIdDep,
    service: ReviewServiceDep,
):
    """Ingest one review into the caller's organization."""
    try:
        review = await service.create(organization_id, data)
    except DuplicateReviewError as e:
        raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=str(e))

    return ReviewEnvelope(
        message="Review created successfully",
        review=ReviewResponse.model_validate(review),
    )


# =============================================================================
# SINGLE REVIEW
# =============================================================================


@router.get("/{review_id}", response_model=ReviewEnvelope)
async def get_review(review: OwnedReviewDep):
    return ReviewEnvelope(review=ReviewResponse.model_validate(review))


@router.put("/{review_id}", response_model=ReviewEnvelope)
async def update_review(
    data: ReviewUpdate,
    review: OwnedReviewDep,
    service: ReviewServiceDep,
):
    """Partial update; omitted fields keep their stored values."""
    review = await service.apply_update(review, data)
    return ReviewEnvelope(
        message="Review updated successfully",
        review=ReviewResponse.model_validate(review),
    )


@router.delete("/{review_id}", response_model=MessageResponse)
async def delete_review(review: OwnedReviewDep, service: ReviewServiceDep):
    await service.delete(review)
    return MessageResponse(message="Review deleted successfully")
