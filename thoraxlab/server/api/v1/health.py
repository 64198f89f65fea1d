"""
Health Check Endpoints.

This module provides basic system status endpoints (health, version, status)
used for monitoring and deployment verification.
"""

import time

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session, utc_now
from thoraxlab.core.database.repositories.projects import ProjectRepository
from thoraxlab.core.database.repositories.users import UserRepository, UserSessionRepository
from thoraxlab.core.models.io import StatusResponse
from thoraxlab.server.core import constant
from thoraxlab.server.services.deps import HubDep

router = APIRouter()

STARTED_AT = time.monotonic()


@router.get(
    "/health",
    summary="Health Check",
    description="Check the operational status of the API server.",
    response_description="Status object.",
)
async def health_check():
    """
    Health check endpoint.

    Returns a simple status indicator to confirm the server is running and reachable.
    """
    return {"status": "ok"}


@router.get(
    "/version",
    summary="Get Version",
    description="Retrieve version information for the API server.",
    response_description="Version object.",
)
async def version():
    """
    Get API version.

    Returns the current semantic version of the API and supported schema version.
    """
    return {"version": constant.API_VERSION, "schema_version": constant.SCHEMA_VERSION}


@router.get(
    f"{constant.API_V1_STR}/status",
    response_model=StatusResponse,
    summary="Server Status",
    description="Counts of users, projects and active sessions, open realtime connections and uptime.",
    response_description="Status counters.",
)
async def server_status(hub: HubDep, session: AsyncSession = Depends(get_session)) -> StatusResponse:
    return StatusResponse(
        users=await UserRepository(session).count(),
        projects=await ProjectRepository(session).count(),
        active_sessions=await UserSessionRepository(session).count_active(utc_now()),
        realtime_connections=hub.connection_count,
        uptime_seconds=int(time.monotonic() - STARTED_AT),
    )
