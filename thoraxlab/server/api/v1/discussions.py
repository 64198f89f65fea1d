"""
Discussion API Endpoints.

Includes:
- Discussion CRUD scoped to a project
- Up/down voting with toggle semantics
- Consensus read-out for a discussion
"""

from typing import Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.models.domain import DiscussionType
from thoraxlab.core.models.io import (
    ConsensusRead,
    DiscussionCreate,
    DiscussionDetail,
    DiscussionRead,
    DiscussionUpdate,
    Page,
    Pagination,
    VoteRequest,
    VoteResult,
)
from thoraxlab.server.services.access import get_discussion, require_member
from thoraxlab.server.services.deps import CurrentUser, HubDep
from thoraxlab.server.services.discussions import DiscussionService

router = APIRouter()


@router.get(
    "/projects/{project_id}/discussions",
    response_model=Page[DiscussionRead],
    summary="List Discussions",
    description="Paginated discussions of a project, newest first (team members only).",
)
async def list_discussions(
    project_id: str,
    user: CurrentUser,
    hub: HubDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    discussion_type: Optional[DiscussionType] = Query(None, alias="type"),
    tag: Optional[str] = None,
    author_id: Optional[str] = None,
    session: AsyncSession = Depends(get_session),
) -> Page[DiscussionRead]:
    items, total = await DiscussionService(session, hub).list(
        project_id, user, page, limit, discussion_type=discussion_type, tag=tag, author_id=author_id
    )
    return Page[DiscussionRead](
        items=[DiscussionRead.model_validate(d) for d in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.post(
    "/projects/{project_id}/discussions",
    response_model=DiscussionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Discussion",
    description="Open a discussion in a project. @mentions of team members notify them.",
    responses={403: {"description": "Viewers and non-members cannot create discussions"}},
)
async def create_discussion(
    project_id: str,
    data: DiscussionCreate,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> DiscussionRead:
    discussion = await DiscussionService(session, hub).create(project_id, data, user)
    return DiscussionRead.model_validate(discussion)


@router.get(
    "/discussions/{discussion_id}",
    response_model=DiscussionDetail,
    summary="Get Discussion",
    description="Discussion with its comments, evidence links, consensus and the caller's vote. Counts a view.",
    responses={404: {"description": "Discussion not found"}},
)
async def get_discussion_detail(
    discussion_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> DiscussionDetail:
    return await DiscussionService(session, hub).get(discussion_id, user)


@router.patch(
    "/discussions/{discussion_id}",
    response_model=DiscussionRead,
    summary="Update Discussion",
    description="Edit title, content, tags or the resolved flag (author only).",
)
async def update_discussion(
    discussion_id: str,
    data: DiscussionUpdate,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> DiscussionRead:
    discussion = await DiscussionService(session, hub).update(discussion_id, data, user)
    return DiscussionRead.model_validate(discussion)


@router.delete(
    "/discussions/{discussion_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Delete Discussion",
    description="Delete a discussion (the author, or the project lead/admin).",
)
async def delete_discussion(
    discussion_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> None:
    await DiscussionService(session, hub).delete(discussion_id, user)


@router.post(
    "/discussions/{discussion_id}/vote",
    response_model=VoteResult,
    summary="Vote on Discussion",
    description="Cast an up or down vote. Repeating the same vote withdraws it; the other vote switches it.",
    response_description="Updated tallies, the caller's vote and the consensus.",
    responses={403: {"description": "Only team members may vote"}},
)
async def vote_discussion(
    discussion_id: str,
    data: VoteRequest,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> VoteResult:
    return await DiscussionService(session, hub).vote(discussion_id, data.vote, user)


@router.get(
    "/discussions/{discussion_id}/consensus",
    response_model=ConsensusRead,
    summary="Discussion Consensus",
    description="Clinical, industry and overall agreement of the current team, and the resulting consensus level.",
)
async def discussion_consensus(
    discussion_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> ConsensusRead:
    discussion = await get_discussion(session, discussion_id)
    await require_member(session, discussion.project_id, user.id)
    return await DiscussionService(session, hub).consensus.consensus_for(discussion)
