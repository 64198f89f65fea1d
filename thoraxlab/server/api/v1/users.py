"""
User Profile Endpoints.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.database.repositories.users import UserRepository
from thoraxlab.core.errors import NotFoundError
from thoraxlab.core.models.io import UserPublic, UserRead, UserUpdate
from thoraxlab.server.services.deps import CurrentUser

router = APIRouter(tags=["users"])


@router.patch(
    "/me",
    response_model=UserRead,
    summary="Update Profile",
    description="Update the current user's display name, institution, specialty or avatar color.",
)
async def update_me(data: UserUpdate, user: CurrentUser, session: AsyncSession = Depends(get_session)) -> UserRead:
    for field, value in data.model_dump(exclude_unset=True).items():
        if value is not None:
            setattr(user, field, value)
    user = await UserRepository(session).update(user)
    return UserRead.model_validate(user)


@router.get(
    "/{user_id}",
    response_model=UserPublic,
    summary="Get User",
    description="Public profile of a user. Email addresses are not exposed.",
    responses={404: {"description": "User not found"}},
)
async def get_user(user_id: str, _: CurrentUser, session: AsyncSession = Depends(get_session)) -> UserPublic:
    found = await UserRepository(session).get_by_id(user_id)
    if not found:
        raise NotFoundError("User", user_id)
    return UserPublic.model_validate(found)
