"""Domain exceptions raised by the service layer.

Handlers translate these into HTTP status codes; services never build
HTTP responses themselves.
"""


class ReviewPilotError(Exception):
    """Base exception for service operations."""
    pass


class DuplicateUserError(ReviewPilotError):
    """An account with this email already exists."""
    pass


class DuplicateReviewError(ReviewPilotError):
    """The (organization, platform, review_id) triple is already stored."""
    pass


class ReviewNotFoundError(ReviewPilotError):
    """Review does not exist."""
    pass


class ReviewAccessDeniedError(ReviewPilotError):
    """Review exists but belongs to an organization the caller does not own."""
    pass


class ResponseGenerationError(ReviewPilotError):
    """The response backend failed to produce a draft."""
    pass


class RateLimitExceededError(ResponseGenerationError):
    pass


class QuotaExceededError(ResponseGenerationError):
    pass
