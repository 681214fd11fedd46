"""Pydantic schemas for API request/response validation."""

from .ai import RespondRequest, RespondResponse, Tone, Usage
from .base import (
    ErrorResponse,
    MessageResponse,
    Pagination,
    ReviewPilotBaseModel,
)
from .billing import BillingStatusResponse, SubscriptionResponse, WebhookAck
from .dashboard import DashboardStats, SentimentBreakdown
from .reviews import (
    ReviewCreate,
    ReviewEnvelope,
    ReviewListResponse,
    ReviewResponse,
    ReviewSummary,
    ReviewUpdate,
)
from .users import (
    LoginRequest,
    LoginResponse,
    MeResponse,
    SignupRequest,
    SignupResponse,
    UserResponse,
)

__all__ = [
    # Base
    "ReviewPilotBaseModel",
    "Pagination",
    "ErrorResponse",
    "MessageResponse",
    # Users
    "SignupRequest",
    "SignupResponse",
    "LoginRequest",
    "LoginResponse",
    "MeResponse",
    "UserResponse",
    # Reviews
    "ReviewCreate",
    "ReviewUpdate",
    "ReviewResponse",
    "ReviewListResponse",
    "ReviewEnvelope",
    "ReviewSummary",
    # Dashboard
    "DashboardStats",
    "SentimentBreakdown",
    # AI
    "Tone",
    "RespondRequest",
    "RespondResponse",
    "Usage",
    # Billing
    "SubscriptionResponse",
    "BillingStatusResponse",
    "WebhookAck",
]
