"""Business logic services for Review Pilot."""

from .errors import (
    DuplicateReviewError,
    DuplicateUserError,
    QuotaExceededError,
    RateLimitExceededError,
    ResponseGenerationError,
    ReviewAccessDeniedError,
    ReviewNotFoundError,
    ReviewPilotError,
)
from .organizations import OrganizationService, default_organization_name
from .response_generator import (
    ResponseContext,
    ResponseGenerator,
    TemplateResponseGenerator,
)
from .reviews import ReviewService
from .seed import TEST_CREDENTIALS, seed_database
from .subscriptions import SubscriptionService
from .users import UserService

__all__ = [
    # Errors
    "ReviewPilotError",
    "DuplicateUserError",
    "DuplicateReviewError",
    "ReviewNotFoundError",
    "ReviewAccessDeniedError",
    "ResponseGenerationError",
    "RateLimitExceededError",
    "QuotaExceededError",
    # Services
    "UserService",
    "OrganizationService",
    "ReviewService",
    "SubscriptionService",
    "default_organization_name",
    # Response generation
    "ResponseContext",
    "ResponseGenerator",
    "TemplateResponseGenerator",
    # Seeding
    "seed_database",
    "TEST_CREDENTIALS",
]
