"""Base schemas and common types for the Review Pilot API."""

import math

from pydantic import BaseModel, ConfigDict, computed_field


class ReviewPilotBaseModel(BaseModel):
    """Base model with common configuration."""

    model_config = ConfigDict(
        from_attributes=True,  # Enable ORM mode
        populate_by_name=True,
        use_enum_values=True,
    )


# =============================================================================
# PAGINATION
# =============================================================================


class Pagination(ReviewPilotBaseModel):
    """Page metadata returned with list endpoints."""

    page: int
    limit: int
    total: int

    @computed_field(alias="totalPages")
    @property
    def total_pages(self) -> int:
        return math.ceil(self.total / self.limit) if self.limit else 0


# =============================================================================
# ERROR RESPONSES
# =============================================================================


class ErrorResponse(BaseModel):
    """Standard error response format."""

    error: str
    details: list[str] | None = None


class MessageResponse(BaseModel):
    success: bool = True
    message: str
