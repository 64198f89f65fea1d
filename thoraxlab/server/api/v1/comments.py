"""
Comment API Endpoints.

Threaded comments on discussions (replies carry ``parent_id``) and
toggleable reactions.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.models.io import CommentCreate, CommentRead, CommentUpdate, ReactionRequest, ReactionResult
from thoraxlab.server.services.deps import CurrentUser, HubDep
from thoraxlab.server.services.discussions import DiscussionService

router = APIRouter()


@router.get(
    "/discussions/{discussion_id}/comments",
    response_model=List[CommentRead],
    summary="List Comments",
    description="Comments of a discussion, oldest first, with reaction counts.",
)
async def list_comments(
    discussion_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> List[CommentRead]:
    return await DiscussionService(session, hub).list_comments(discussion_id, user)


@router.post(
    "/discussions/{discussion_id}/comments",
    response_model=CommentRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Comment",
    description="Comment on a discussion or reply to a comment of the same discussion.",
    responses={
        400: {"description": "Parent comment belongs to another discussion"},
        403: {"description": "Viewers and non-members cannot comment"},
    },
)
async def add_comment(
    discussion_id: str,
    data: CommentCreate,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> CommentRead:
    comment = await DiscussionService(session, hub).add_comment(discussion_id, data, user)
    return CommentRead.model_validate(comment)


@router.patch(
    "/comments/{comment_id}",
    response_model=CommentRead,
    summary="Edit Comment",
    description="Edit a comment (author only). The comment is marked as edited.",
)
async def edit_comment(
    comment_id: str,
    data: CommentUpdate,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> CommentRead:
    comment = await DiscussionService(session, hub).edit_comment(comment_id, data, user)
    return CommentRead.model_validate(comment)


@router.delete(
    "/comments/{comment_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Comment",
    description="Delete a comment (the author, or the project lead/admin).",
)
async def delete_comment(
    comment_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> None:
    await DiscussionService(session, hub).delete_comment(comment_id, user)


@router.post(
    "/comments/{comment_id}/reactions",
    response_model=ReactionResult,
    summary="Toggle Reaction",
    description="Set or clear the caller's reaction on a comment and return the reaction counts.",
)
async def react_to_comment(
    comment_id: str,
    data: ReactionRequest,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> ReactionResult:
    return await DiscussionService(session, hub).react(comment_id, data.reaction, user)
