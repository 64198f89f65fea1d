"""
Authentication Endpoints.

Login issues a bearer session token (registering the user on first login);
logout deletes it. ``/auth/me`` returns the current user with dashboard
counters.
"""

from __future__ import annotations

from typing import Optional

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.database.repositories.projects import ProjectTeamRepository
from thoraxlab.core.errors import AuthenticationError
from thoraxlab.core.models.io import CurrentUserRead, LoginRequest, LoginResponse, UserRead
from thoraxlab.server.services.auth import AuthService
from thoraxlab.server.services.deps import CurrentUser, get_current_token
from thoraxlab.server.services.notifications import NotificationService

router = APIRouter(tags=["auth"])


@router.post(
    "/login",
    response_model=LoginResponse,
    summary="Log In",
    description="Log in with a name and email address. The first login registers the user.",
    response_description="The session token, its expiry and the user profile.",
    responses={
        200: {"description": "Logged in"},
        400: {"description": "Invalid email address"},
    },
)
async def login(data: LoginRequest, session: AsyncSession = Depends(get_session)) -> LoginResponse:
    """
    Log in.

    - **name**: Display name (required).
    - **email**: Email address; matched case-insensitively.
    - **role**: clinician, industry or public.
    """
    user_session, user = await AuthService(session).login(data)
    return LoginResponse(token=user_session.token, expires_at=user_session.expires_at, user=UserRead.model_validate(user))


@router.post(
    "/logout",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Log Out",
    description="Delete the current session token.",
    responses={204: {"description": "Logged out"}, 401: {"description": "No session token supplied"}},
)
async def logout(
    token: Optional[str] = Depends(get_current_token),
    session: AsyncSession = Depends(get_session),
) -> None:
    if not token:
        raise AuthenticationError("Authentication required", code="NO_SESSION")
    await AuthService(session).logout(token)


@router.get(
    "/me",
    response_model=CurrentUserRead,
    summary="Current User",
    description="Return the authenticated user, the number of projects they belong to and their unread notifications.",
    responses={401: {"description": "Missing, invalid or expired session"}},
)
async def me(user: CurrentUser, session: AsyncSession = Depends(get_session)) -> CurrentUserRead:
    return CurrentUserRead(
        user=UserRead.model_validate(user),
        project_count=await ProjectTeamRepository(session).count_projects_for_user(user.id),
        unread_notifications=await NotificationService(session).unread_count(user.id),
    )
