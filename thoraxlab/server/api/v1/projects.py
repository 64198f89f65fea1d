"""
Project API Endpoints.

This module provides the interface for research projects and their teams.

Includes:
- Project CRUD operations (list, create, get, update, archive)
- Team management (list, add, change role, remove)
- Project statistics and activity feed
- JSON/CSV export for team members
"""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import Response
from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import get_session
from thoraxlab.core.database.repositories.projects import ProjectFilters
from thoraxlab.core.models.domain import ExportFormat, ProjectStatus
from thoraxlab.core.models.io import (
    ActivityRead,
    Page,
    Pagination,
    ProjectCreate,
    ProjectDetail,
    ProjectRead,
    ProjectStats,
    ProjectUpdate,
    TeamMemberAdd,
    TeamMemberRead,
    TeamMemberUpdate,
)
from thoraxlab.server.services.access import get_project
from thoraxlab.server.services.deps import CurrentUser, HubDep
from thoraxlab.server.services.export import ExportService, export_filename, render_csv
from thoraxlab.server.services.metrics import MetricsService
from thoraxlab.server.services.projects import ProjectService

router = APIRouter()


@router.get(
    "",
    response_model=Page[ProjectRead],
    summary="List Projects",
    description="Paginated project listing. Archived projects are hidden unless requested.",
    response_description="A page of projects.",
)
async def list_projects(
    user: CurrentUser,
    hub: HubDep,
    page: int = Query(1, ge=1),
    limit: int = Query(20, ge=1, le=100),
    project_status: Optional[ProjectStatus] = Query(None, alias="status"),
    search: Optional[str] = Query(None, max_length=200),
    tag: Optional[str] = None,
    template: Optional[str] = None,
    lead_id: Optional[str] = None,
    member_id: Optional[str] = None,
    include_archived: bool = False,
    sort: Literal["updated", "created", "title"] = "updated",
    order: Literal["desc", "asc"] = "desc",
    session: AsyncSession = Depends(get_session),
) -> Page[ProjectRead]:
    """
    List projects.

    - **status**: Only projects in this status (``archived`` lists archived projects).
    - **search**: Case-insensitive match on title and description.
    - **tag**: Only projects carrying this tag.
    - **include_archived**: Include archived projects in the listing.
    """
    filters = ProjectFilters(
        status=project_status,
        search=search,
        tag=tag,
        template_id=template,
        lead_id=lead_id,
        member_id=member_id,
        include_archived=include_archived,
        sort=sort,
        order=order,
    )
    items, total = await ProjectService(session, hub).list(filters, page, limit)
    return Page[ProjectRead](
        items=[ProjectRead.model_validate(p) for p in items],
        pagination=Pagination.build(page, limit, total),
    )


@router.post(
    "",
    response_model=ProjectRead,
    status_code=status.HTTP_201_CREATED,
    summary="Create Project",
    description="Create a project. The creator becomes its lead and a welcome discussion is opened.",
    response_description="The created project.",
    responses={422: {"description": "Invalid payload or unknown template"}},
)
async def create_project(
    data: ProjectCreate, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> ProjectRead:
    project = await ProjectService(session, hub).create(data, user)
    return ProjectRead.model_validate(project)


@router.get(
    "/{project_id}",
    response_model=ProjectDetail,
    summary="Get Project",
    description="Project with its team, statistics, timeline estimate and up to 3 similar projects.",
    responses={404: {"description": "Project not found"}},
)
async def get_project_detail(
    project_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> ProjectDetail:
    return await ProjectService(session, hub).detail(project_id, user)


@router.patch(
    "/{project_id}",
    response_model=ProjectRead,
    summary="Update Project",
    description="Update project fields. Requires the lead, admin or contributor role.",
    responses={
        403: {"description": "Not allowed to update this project"},
        404: {"description": "Project not found"},
        409: {"description": "Project is archived"},
    },
)
async def update_project(
    project_id: str, data: ProjectUpdate, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> ProjectRead:
    project = await ProjectService(session, hub).update(project_id, data, user)
    return ProjectRead.model_validate(project)


@router.post(
    "/{project_id}/archive",
    response_model=ProjectRead,
    summary="Archive Project",
    description="Archive a project (lead/admin only). Archived projects disappear from listings and search.",
    responses={409: {"description": "Project is already archived"}},
)
async def archive_project(
    project_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> ProjectRead:
    project = await ProjectService(session, hub).archive(project_id, user)
    return ProjectRead.model_validate(project)


@router.get(
    "/{project_id}/team",
    response_model=List[TeamMemberRead],
    summary="List Team",
)
async def list_team(
    project_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> List[TeamMemberRead]:
    await get_project(session, project_id)
    return await ProjectService(session, hub).list_team(project_id)


@router.post(
    "/{project_id}/team",
    response_model=TeamMemberRead,
    status_code=status.HTTP_201_CREATED,
    summary="Add Team Member",
    description="Add an existing user to the team (lead/admin only).",
    responses={
        404: {"description": "User not found"},
        409: {"description": "Already a member, or the team is full"},
    },
)
async def add_team_member(
    project_id: str, data: TeamMemberAdd, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> TeamMemberRead:
    return await ProjectService(session, hub).add_member(project_id, data, user)


@router.patch(
    "/{project_id}/team/{member_id}",
    response_model=TeamMemberRead,
    summary="Change Member Role",
    description="Change a member's team role (lead/admin only). The lead's role cannot be changed.",
)
async def change_member_role(
    project_id: str,
    member_id: str,
    data: TeamMemberUpdate,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
) -> TeamMemberRead:
    return await ProjectService(session, hub).change_role(project_id, member_id, data.role, user)


@router.delete(
    "/{project_id}/team/{member_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    summary="Remove Team Member",
    description="Remove a member. Leads/admins may remove others; any member may leave. The lead cannot be removed.",
)
async def remove_team_member(
    project_id: str, member_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> None:
    await ProjectService(session, hub).remove_member(project_id, member_id, user)


@router.get(
    "/{project_id}/stats",
    response_model=ProjectStats,
    summary="Project Statistics",
    description="Discussion, comment and vote counts with consensus, engagement and pulse scores.",
)
async def project_stats(project_id: str, user: CurrentUser, session: AsyncSession = Depends(get_session)) -> ProjectStats:
    project = await get_project(session, project_id)
    return await MetricsService(session).project_stats(project)


@router.get(
    "/{project_id}/activity",
    response_model=List[ActivityRead],
    summary="Project Activity",
    description="Activity feed of a project, newest first (team members only).",
)
async def project_activity(
    project_id: str,
    user: CurrentUser,
    hub: HubDep,
    limit: int = Query(50, ge=1, le=200),
    session: AsyncSession = Depends(get_session),
) -> List[ActivityRead]:
    entries = await ProjectService(session, hub).activity_feed(project_id, user, limit)
    return [ActivityRead.model_validate(e) for e in entries]


@router.get(
    "/{project_id}/export",
    summary="Export Project",
    description="Export a project with its team, discussions and decisions as JSON or CSV (team members only).",
    response_description="The export document, or a CSV attachment.",
    responses={403: {"description": "Not a team member"}},
)
async def export_project(
    project_id: str,
    user: CurrentUser,
    hub: HubDep,
    export_format: ExportFormat = Query(ExportFormat.json, alias="format"),
    anonymize: bool = False,
    session: AsyncSession = Depends(get_session),
):
    """
    Export a project.

    - **format**: ``json`` (default) or ``csv``.
    - **anonymize**: Replace person names with ``Member N``.
    """
    document = await ExportService(session, hub).build(project_id, user, anonymize=anonymize)
    if export_format == ExportFormat.csv:
        filename = export_filename(project_id, export_format)
        return Response(
            content=render_csv(document),
            media_type="text/csv",
            headers={"Content-Disposition": f'attachment; filename="{filename}"'},
        )
    return document
