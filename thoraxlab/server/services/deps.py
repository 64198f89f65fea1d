"""
Service Dependencies.

Provides the FastAPI dependencies shared by the API routers: the database
session for the current user lookup, the authenticated user and the realtime hub.
"""

from typing import Annotated, Optional

from fastapi import Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.database.entities import User
from thoraxlab.server.services.auth import AuthService
from thoraxlab.server.services.realtime import RealtimeHub, get_hub


def extract_token(authorization: Optional[str], session_id: Optional[str]) -> Optional[str]:
    """Read a bearer token from the Authorization header, else from ``session_id``."""
    if authorization:
        scheme, _, value = authorization.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return value.strip()
    return session_id or None


async def get_current_user(
    request: Request,
    session: AsyncSession = Depends(get_session),
    session_id: Optional[str] = Query(default=None, include_in_schema=False),
) -> User:
    token = extract_token(request.headers.get("Authorization"), session_id)
    user = await AuthService(session).resolve(token)
    request.state.user_id = user.id
    return user


async def get_current_token(
    request: Request,
    session_id: Optional[str] = Query(default=None, include_in_schema=False),
) -> Optional[str]:
    return extract_token(request.headers.get("Authorization"), session_id)


CurrentUser = Annotated[User, Depends(get_current_user)]
HubDep = Annotated[RealtimeHub, Depends(get_hub)]
