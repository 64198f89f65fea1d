"""
Evidence Link API Endpoints.
"""

from typing import List

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.models.io import EvidenceCreate, EvidenceRead
from thoraxlab.server.services.deps import CurrentUser, HubDep
from thoraxlab.server.services.discussions import DiscussionService

router = APIRouter()


@router.get(
    "/discussions/{discussion_id}/evidence",
    response_model=List[EvidenceRead],
    summary="List Evidence",
)
async def list_evidence(
    discussion_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> List[EvidenceRead]:
    links = await DiscussionService(session, hub).list_evidence(discussion_id, user)
    return [EvidenceRead.model_validate(link) for link in links]


@router.post(
    "/discussions/{discussion_id}/evidence",
    response_model=EvidenceRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Evidence",
    description="Attach an http(s) evidence link to a discussion (team members except viewers).",
)
async def add_evidence(
    discussion_id: str,
    data: EvidenceCreate,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> EvidenceRead:
    link = await DiscussionService(session, hub).add_evidence(discussion_id, data, user)
    return EvidenceRead.model_validate(link)


@router.delete(
    "/evidence/{evidence_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove Evidence",
    description="Remove an evidence link (the person who added it, or the project lead/admin).",
)
async def delete_evidence(
    evidence_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> None:
    await DiscussionService(session, hub).delete_evidence(evidence_id, user)
