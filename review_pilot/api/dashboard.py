"""Dashboard analytics API."""

from fastapi import APIRouter

from ..core import OrganizationIdDep, SessionDep
from ..schemas import DashboardStats
from ..services import ReviewService

router = APIRouter(prefix="/dashboard", tags=["dashboard"])


@router.get("/stats", response_model=DashboardStats)
async def get_stats(organization_id: OrganizationIdDep, session: SessionDep):
    """Counts, average rating, sentiment split and the latest five reviews."""
    return await ReviewService(session).stats(organization_id)
