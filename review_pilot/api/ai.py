"""Response draft generation API."""

import logging

from fastapi import APIRouter, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError

from ..core import AIResponseDep, ResponseGeneratorDep, SessionDep
from ..models import ReviewStatus
from ..schemas import RespondRequest, RespondResponse, Usage
from ..services import (
    QuotaExceededError,
    RateLimitExceededError,
    ResponseContext,
    ResponseGenerationError,
    ReviewAccessDeniedError,
    ReviewNotFoundError,
    ReviewService,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/ai", tags=["ai"])

# Flat allowance reported back to clients; credits are not metered yet
REMAINING_CREDITS = 100


@router.post("/respond", response_model=RespondResponse)
async def respond(
    data: RespondRequest,
    user: AIResponseDep,
    generator: ResponseGeneratorDep,
    session: SessionDep,
):
    """Draft a reply to a review.

    With ``reviewId`` the draft is also stored on that review (status reset
    to pending), provided the review belongs to the caller.
    """
    reviews = ReviewService(session)
    review = None
    if data.review_id is not None:
        try:
            review = await reviews.get_owned(data.review_id, user)
        except ReviewNotFoundError:
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="Review not found")
        except ReviewAccessDeniedError:
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Access denied")

    context = ResponseContext(
        business_name=data.business_name or f"{user.name}'s Business",
        platform=data.platform,
        custom_instructions=data.custom_instructions,
    )

    try:
        response = await generator.generate(data.review_text, data.rating, data.tone, context)
    except RateLimitExceededError:
        raise HTTPException(
            status_code=status.HTTP_429_TOO_MANY_REQUESTS,
            detail="Rate limit exceeded. Please try again later.",
        )
    except QuotaExceededError:
        raise HTTPException(
            status_code=status.HTTP_402_PAYMENT_REQUIRED,
            detail="AI service quota exceeded. Please try again later.",
        )
    except ResponseGenerationError as e:
        logger.error(f"Response generation failed for user {user.id}: {e}")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Failed to generate response",
        )

    if review is not None:
        # The draft is still returned if it cannot be stored
        try:
            async with session.begin_nested():
                await reviews.update_response(review, response, ReviewStatus.PENDING)
        except SQLAlchemyError as e:
            logger.warning(f"Could not save draft on review {review.id}: {e}")

    return RespondResponse(
        response=response,
        usage=Usage(tokens_used=len(response), remaining_credits=REMAINING_CREDITS),
    )
