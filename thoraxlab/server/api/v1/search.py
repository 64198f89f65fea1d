"""
Search API Endpoint.
"""

from fastapi import APIRouter, Depends, Query
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.models.domain import SearchType
from thoraxlab.core.models.io import SearchResponse
from thoraxlab.server.services.deps import CurrentUser
from thoraxlab.server.services.search import SearchService

router = APIRouter(tags=["search"])


@router.get(
    "",
    response_model=SearchResponse,
    summary="Search",
    description="Search projects (ranked by relevance), discussions and users. Archived projects are excluded.",
    responses={400: {"description": "Query shorter than 2 characters"}},
)
async def search(
    user: CurrentUser,
    q: str = Query("", max_length=200),
    search_type: SearchType = Query(SearchType.all, alias="type"),
    limit: int = Query(10, ge=1, le=50),
    session: AsyncSession = Depends(get_session),
) -> SearchResponse:
    """
    Search the platform.

    - **q**: Search terms; every term must match a project for it to be returned.
    - **type**: all, projects, discussions or users.
    """
    return await SearchService(session).search(q, search_type, limit)
