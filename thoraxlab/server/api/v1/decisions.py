"""
Decision API Endpoints.

Decisions are created manually by project leads/admins or automatically when
a decision discussion reaches high consensus. Team members vote on pending
decisions; leads/admins resolve them.
"""

from typing import List, Optional

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.models.domain import DecisionStatus
from thoraxlab.core.models.io import (
    DecisionCreate,
    DecisionDetail,
    DecisionRead,
    DecisionResolve,
    DecisionVoteRequest,
)
from thoraxlab.server.services.decisions import DecisionService
from thoraxlab.server.services.deps import CurrentUser, HubDep

router = APIRouter()


@router.get(
    "/projects/{project_id}/decisions",
    response_model=List[DecisionRead],
    summary="List Decisions",
    description="Decisions of a project, newest first, optionally filtered by status.",
)
async def list_decisions(
    project_id: str,
    user: CurrentUser,
    hub: HubDep,
    decision_status: Optional[DecisionStatus] = Query(None, alias="status"),
    session: AsyncSession = Depends(get_session),
) -> List[DecisionRead]:
    decisions = await DecisionService(session, hub).list_for_project(project_id, user, decision_status)
    return [DecisionRead.model_validate(d) for d in decisions]


@router.post(
    "/projects/{project_id}/decisions",
    response_model=DecisionRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Decision",
    description="Record a manual decision (lead/admin only). It starts as pending.",
    responses={
        403: {"description": "Only a project lead/admin can create decisions"},
        409: {"description": "The discussion already has a decision"},
    },
)
async def create_decision(
    project_id: str,
    data: DecisionCreate,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> DecisionRead:
    decision = await DecisionService(session, hub).create(project_id, data, user)
    return DecisionRead.model_validate(decision)


@router.get(
    "/decisions/{decision_id}",
    response_model=DecisionDetail,
    summary="Get Decision",
    description="Decision with its approve/reject/abstain tally.",
)
async def get_decision(
    decision_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> DecisionDetail:
    return await DecisionService(session, hub).get(decision_id, user)


@router.post(
    "/decisions/{decision_id}/vote",
    response_model=DecisionDetail,
    summary="Vote on Decision",
    description="Approve, reject or abstain. Voting again replaces the earlier vote.",
)
async def vote_decision(
    decision_id: str,
    data: DecisionVoteRequest,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> DecisionDetail:
    return await DecisionService(session, hub).vote(decision_id, data, user)


@router.post(
    "/decisions/{decision_id}/resolve",
    response_model=DecisionRead,
    summary="Resolve Decision",
    description="Approve, reject or defer a pending decision (lead/admin only).",
    responses={409: {"description": "Decision is already resolved"}},
)
async def resolve_decision(
    decision_id: str,
    data: DecisionResolve,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> DecisionRead:
    decision = await DecisionService(session, hub).resolve(decision_id, data, user)
    return DecisionRead.model_validate(decision)
