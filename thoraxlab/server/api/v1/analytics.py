"""
Analytics API Endpoints.

Platform-wide counters (public) and the detailed breakdown (authenticated).
"""

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.models.io import DetailedAnalytics, PlatformStats
from thoraxlab.server.services.deps import CurrentUser
from thoraxlab.server.services.metrics import MetricsService

router = APIRouter(tags=["analytics"])


@router.get(
    "/stats",
    response_model=PlatformStats,
    summary="Platform Statistics",
    description="Totals of projects, users, discussions and comments with the platform consensus rate.",
)
async def platform_stats(session: AsyncSession = Depends(get_session)) -> PlatformStats:
    return await MetricsService(session).platform_stats()


@router.get(
    "/detailed",
    response_model=DetailedAnalytics,
    summary="Detailed Analytics",
    description="Breakdowns by role, institution, status and template, participation and recent activity.",
)
async def detailed_analytics(user: CurrentUser, session: AsyncSession = Depends(get_session)) -> DetailedAnalytics:
    return await MetricsService(session).detailed()
