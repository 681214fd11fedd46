"""Pydantic schemas for response draft generation."""

from enum import Enum

from pydantic import Field

from .base import ReviewPilotBaseModel


class Tone(str, Enum):
    PROFESSIONAL = "professional"
    FRIENDLY = "friendly"
    FORMAL = "formal"
    CASUAL = "casual"


class RespondRequest(ReviewPilotBaseModel):
    review_id: int | None = Field(default=None, alias="reviewId")
    review_text: str = Field(..., alias="reviewText")
    rating: int = Field(..., ge=1, le=5)
    platform: str
    tone: Tone = Tone.PROFESSIONAL
    business_name: str | None = Field(default=None, alias="businessName")
    custom_instructions: str | None = Field(default=None, alias="customInstructions")


class Usage(ReviewPilotBaseModel):
    tokens_used: int = Field(alias="tokensUsed")
    remaining_credits: int = Field(alias="remainingCredits")


class RespondResponse(ReviewPilotBaseModel):
    success: bool = True
    response: str
    usage: Usage
