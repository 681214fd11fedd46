"""API routes for Review Pilot."""

from fastapi import APIRouter

from .ai import router as ai_router
from .auth import router as auth_router
from .billing import router as billing_router
from .dashboard import router as dashboard_router
from .reviews import router as reviews_router
from .seed import router as seed_router

# Main API router
api_router = APIRouter()

# Auth routes (signup, login, logout, me)
api_router.include_router(auth_router)

# Tenant-scoped review data
api_router.include_router(reviews_router)
api_router.include_router(dashboard_router)

# Response drafts - trial or paid plan required
api_router.include_router(ai_router)

api_router.include_router(billing_router)

# Fixtures (refused in production)
api_router.include_router(seed_router)

__all__ = ["api_router"]
