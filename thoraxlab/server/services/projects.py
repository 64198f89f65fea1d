"""
Project service.

Project CRUD, archiving and team management. Every mutation is logged to the
activity log, notifies the affected team members and is broadcast to the
project room.
"""

from __future__ import annotations

from typing import List, Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Discussion, Project, ProjectTeamMember, User
from thoraxlab.core.database.repositories.activity_log import ActivityLogRepository
from thoraxlab.core.database.repositories.discussions import DiscussionRepository
from thoraxlab.core.database.repositories.projects import (
    ProjectFilters,
    ProjectRepository,
    ProjectTeamRepository,
)
from thoraxlab.core.database.repositories.users import UserRepository
from thoraxlab.core.errors import ConflictError, NotFoundError, PermissionDeniedError
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.domain import (
    DiscussionType,
    NotificationType,
    ProjectStatus,
    TeamRole,
)
from thoraxlab.core.models.io import (
    ProjectCreate,
    ProjectDetail,
    ProjectRead,
    ProjectUpdate,
    TeamMemberAdd,
    TeamMemberRead,
)
from thoraxlab.server.core.config import settings
from thoraxlab.server.services.access import EDITORS, MANAGERS, get_membership, get_project, require_member
from thoraxlab.server.services.activity import ActivityService
from thoraxlab.server.services.discussions import DiscussionService
from thoraxlab.server.services.metrics import MetricsService, estimate_timeline
from thoraxlab.server.services.notifications import NotificationService
from thoraxlab.server.services.realtime import RealtimeHub, get_hub, project_room
from thoraxlab.server.services.templates import ensure_known_template

logger = get_logger(__name__)


def team_member_read(member: ProjectTeamMember, user: User) -> TeamMemberRead:
    return TeamMemberRead(
        user_id=user.id,
        name=user.name,
        role=member.role,
        user_role=user.role,
        institution=user.institution,
        specialty=user.specialty,
        avatar_color=user.avatar_color,
        joined_at=member.joined_at,
    )


class ProjectService:
    """Service for projects and their teams."""

    def __init__(self, session: AsyncSession, hub: Optional[RealtimeHub] = None):
        self.session = session
        self.hub = hub or get_hub()
        self.repo = ProjectRepository(session)
        self.team = ProjectTeamRepository(session)
        self.users = UserRepository(session)
        self.notifications = NotificationService(session, self.hub)
        self.activity = ActivityService(session)

    async def _broadcast(self, project: Project, event: str) -> None:
        await self.hub.send_to_project(project.id, event, ProjectRead.model_validate(project).model_dump(mode="json"))

    async def list(self, filters: ProjectFilters, page: int, limit: int) -> Tuple[List[Project], int]:
        return await self.repo.list_page(filters, page, limit)

    async def create(self, data: ProjectCreate, user: User) -> Project:
        """
        Create a project led by ``user``.

        The creator joins the team as lead and a welcome discussion is opened.

        Raises:
            ValidationError: If ``template_id`` names no known template (422)
        """
        if data.template_id:
            ensure_known_template(data.template_id)

        project = await self.repo.create(Project(lead_id=user.id, **data.model_dump()))
        await self.team.create(ProjectTeamMember(project_id=project.id, user_id=user.id, role=TeamRole.lead))
        await DiscussionRepository(self.session).create(
            Discussion(
                project_id=project.id,
                author_id=user.id,
                title=f"Welcome to {project.title}",
                content=(
                    f"This is the starting point for {project.title}. "
                    "Introduce yourself, share the research question and link the key evidence."
                ),
                discussion_type=DiscussionType.insight,
                tags=["welcome"],
            )
        )
        logger.info(f"Project {project.id} created by {user.id}")

        await self.activity.log(user.id, "project_created", project.id, "project", project.id, {"title": project.title})
        await self.notifications.notify(
            user.id,
            NotificationType.project_created,
            "Project created",
            f'Your project "{project.title}" is ready. Invite your team to start collaborating.',
            data={"project_id": project.id},
        )
        await self._broadcast(project, "project:created")
        return project

    async def detail(self, project_id: str, user: User) -> ProjectDetail:
        """Project view with team, statistics, timeline and similar projects."""
        project = await get_project(self.session, project_id)
        membership = await get_membership(self.session, project_id, user.id)
        metrics = MetricsService(self.session)
        return ProjectDetail(
            project=ProjectRead.model_validate(project),
            team=await self.list_team(project_id),
            stats=await metrics.project_stats(project),
            timeline=estimate_timeline(project),
            similar_projects=await metrics.similar_projects(project, limit=3),
            user_role=membership.role if membership else None,
        )

    async def update(self, project_id: str, data: ProjectUpdate, user: User) -> Project:
        project, _ = await require_member(self.session, project_id, user.id, EDITORS, "update this project")
        if project.is_archived:
            raise ConflictError("Archived projects cannot be modified")

        changes = {field: value for field, value in data.model_dump(exclude_unset=True).items() if value is not None}
        for field, value in changes.items():
            setattr(project, field, value)
        project.updated_at = utc_now()
        project = await self.repo.update(project)

        await self.activity.log(
            user.id, "project_updated", project.id, "project", project.id, {"fields": sorted(changes)}
        )
        member_ids = [member.user_id for member, _ in await self.team.list_team(project.id)]
        await self.notifications.notify_many(
            member_ids,
            NotificationType.project_updated,
            "Project updated",
            f'{user.name} updated "{project.title}".',
            data={"project_id": project.id, "fields": sorted(changes)},
            exclude=user.id,
        )
        await self._broadcast(project, "project:updated")
        return project

    async def archive(self, project_id: str, user: User) -> Project:
        """Archive a project, hiding it from listings and search (lead/admin only)."""
        project, _ = await require_member(self.session, project_id, user.id, MANAGERS, "archive this project")
        if project.is_archived:
            raise ConflictError("Project is already archived")
        now = utc_now()
        project.status = ProjectStatus.archived
        project.archived_at = now
        project.updated_at = now
        project = await self.repo.update(project)
        logger.info(f"Project {project.id} archived by {user.id}")

        await self.activity.log(user.id, "project_archived", project.id, "project", project.id)
        await self._broadcast(project, "project:archived")
        return project

    # ------------------------------------------------------------------
    # Team
    # ------------------------------------------------------------------

    async def list_team(self, project_id: str) -> List[TeamMemberRead]:
        return [team_member_read(member, u) for member, u in await self.team.list_team(project_id)]

    async def add_member(self, project_id: str, data: TeamMemberAdd, user: User) -> TeamMemberRead:
        """
        Add a user to the team (lead/admin only).

        Raises:
            NotFoundError: If the user does not exist
            ConflictError: If the user is already a member or the team is full
        """
        project, _ = await require_member(self.session, project_id, user.id, MANAGERS, "manage the team")
        new_user = await self.users.get_by_id(data.user_id)
        if new_user is None:
            raise NotFoundError("User", data.user_id)
        if await self.team.get_member(project_id, data.user_id) is not None:
            raise ConflictError("User is already a team member")
        max_size = settings.collaboration.max_team_size
        if await self.team.count_team(project_id) >= max_size:
            raise ConflictError(f"Team is full (maximum {max_size} members)")

        member = await self.team.create(ProjectTeamMember(project_id=project_id, user_id=new_user.id, role=data.role))
        await self.activity.log(
            user.id, "team_member_added", project_id, "user", new_user.id, {"role": member.role.value}
        )
        await self.notifications.notify(
            new_user.id,
            NotificationType.team_added,
            "Added to a project",
            f'{user.name} added you to "{project.title}" as {member.role.value}.',
            data={"project_id": project_id},
        )
        read = team_member_read(member, new_user)
        await self.hub.send_to_project(project_id, "team:member_added", read.model_dump(mode="json"))
        return read

    async def change_role(self, project_id: str, member_id: str, role: TeamRole, user: User) -> TeamMemberRead:
        await require_member(self.session, project_id, user.id, MANAGERS, "manage the team")
        member = await self.team.get_member(project_id, member_id)
        if member is None:
            raise NotFoundError("Team member", member_id)
        if member.role == TeamRole.lead:
            raise PermissionDeniedError("The project lead's role cannot be changed")
        member.role = role
        member = await self.team.update(member)
        await self.activity.log(user.id, "team_role_changed", project_id, "user", member_id, {"role": role.value})
        member_user = await self.users.get_by_id(member_id)
        read = team_member_read(member, member_user)
        await self.hub.send_to_project(project_id, "team:member_updated", read.model_dump(mode="json"))
        return read

    async def remove_member(self, project_id: str, member_id: str, user: User) -> None:
        """
        Remove a member from the team.

        Leads/admins may remove anyone but the lead; members may remove
        themselves. The departing member's discussion votes are withdrawn so
        tallies stay within the team, and their project room subscriptions
        are dropped before anything else is broadcast.
        """
        _, membership = await require_member(self.session, project_id, user.id, action="manage the team")
        if member_id != user.id and membership.role not in MANAGERS:
            raise PermissionDeniedError("Only a project lead/admin can remove other members")
        member = await self.team.get_member(project_id, member_id)
        if member is None:
            raise NotFoundError("Team member", member_id)
        if member.role == TeamRole.lead:
            raise PermissionDeniedError("The project lead cannot be removed")

        await self.team.remove_member(project_id, member_id)
        await self.hub.evict_user(project_room(project_id), member_id)
        await DiscussionService(self.session, self.hub).remove_votes_of(project_id, member_id)
        await self.activity.log(user.id, "team_member_removed", project_id, "user", member_id)
        await self.hub.send_to_project(project_id, "team:member_removed", {"user_id": member_id})

    async def activity_feed(self, project_id: str, user: User, limit: int = 50):
        await require_member(self.session, project_id, user.id)
        return await ActivityLogRepository(self.session).list_for_project(project_id, limit)
