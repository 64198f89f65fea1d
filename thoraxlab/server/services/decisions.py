"""
Decision service.

Manual decisions are recorded by project leads/admins and start out pending;
team members vote on them until a lead/admin resolves them.
"""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Decision, User
from thoraxlab.core.database.repositories.decisions import DecisionRepository, DecisionVoteRepository
from thoraxlab.core.errors import ConflictError, NotFoundError, ValidationError
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.domain import DecisionOrigin, DecisionStatus, NotificationType
from thoraxlab.core.models.io import (
    DecisionCreate,
    DecisionDetail,
    DecisionRead,
    DecisionResolve,
    DecisionVoteRequest,
)
from thoraxlab.server.services.access import MANAGERS, get_discussion, require_member
from thoraxlab.server.services.activity import ActivityService
from thoraxlab.server.services.notifications import NotificationService
from thoraxlab.server.services.realtime import RealtimeHub, get_hub

logger = get_logger(__name__)


class DecisionService:
    """Service for project decisions."""

    def __init__(self, session: AsyncSession, hub: Optional[RealtimeHub] = None):
        self.session = session
        self.hub = hub or get_hub()
        self.repo = DecisionRepository(session)
        self.votes = DecisionVoteRepository(session)

    async def _get(self, decision_id: str) -> Decision:
        decision = await self.repo.get_by_id(decision_id)
        if decision is None:
            raise NotFoundError("Decision", decision_id)
        return decision

    async def detail(self, decision: Decision) -> DecisionDetail:
        tally = await self.votes.tally(decision.id)
        return DecisionDetail(**DecisionRead.model_validate(decision).model_dump(), votes=tally)

    async def list_for_project(
        self, project_id: str, user: User, status: Optional[DecisionStatus] = None
    ) -> List[Decision]:
        await require_member(self.session, project_id, user.id)
        return await self.repo.list_for_project(project_id, status)

    async def create(self, project_id: str, data: DecisionCreate, user: User) -> Decision:
        """Record a manual decision (lead/admin only)."""
        await require_member(self.session, project_id, user.id, MANAGERS, "record decisions")
        if data.discussion_id:
            discussion = await get_discussion(self.session, data.discussion_id)
            if discussion.project_id != project_id:
                raise ValidationError("The discussion belongs to another project")
            if await self.repo.get_by_discussion(discussion.id) is not None:
                raise ConflictError("This discussion already has a decision")

        decision = await self.repo.create(
            Decision(
                project_id=project_id,
                discussion_id=data.discussion_id,
                title=data.title,
                description=data.description,
                priority=data.priority,
                deadline=data.deadline,
                status=DecisionStatus.pending,
                origin=DecisionOrigin.manual,
                created_by=user.id,
            )
        )
        await ActivityService(self.session).log(
            user.id, "decision_created", project_id, "decision", decision.id, {"title": decision.title}
        )
        await self.hub.send_to_project(
            project_id, "decision:created", DecisionRead.model_validate(decision).model_dump(mode="json")
        )
        return decision

    async def get(self, decision_id: str, user: User) -> DecisionDetail:
        decision = await self._get(decision_id)
        await require_member(self.session, decision.project_id, user.id)
        return await self.detail(decision)

    async def vote(self, decision_id: str, data: DecisionVoteRequest, user: User) -> DecisionDetail:
        """Record the caller's vote; re-voting replaces the previous vote."""
        decision = await self._get(decision_id)
        await require_member(self.session, decision.project_id, user.id, action="vote on decisions")
        await self.votes.upsert(decision.id, user.id, data.vote, data.comment)
        return await self.detail(decision)

    async def resolve(self, decision_id: str, data: DecisionResolve, user: User) -> Decision:
        """
        Resolve a pending decision.

        Raises:
            ConflictError: If the decision was already resolved
        """
        decision = await self._get(decision_id)
        await require_member(self.session, decision.project_id, user.id, MANAGERS, "resolve decisions")
        if decision.resolved_at is not None or decision.status != DecisionStatus.pending:
            raise ConflictError("Decision is already resolved")

        decision.status = data.status
        decision.resolved_by = user.id
        decision.resolved_at = utc_now()
        decision = await self.repo.update(decision)
        logger.info(f"Decision {decision.id} resolved as {decision.status.value}")

        await ActivityService(self.session).log(
            user.id, "decision_resolved", decision.project_id, "decision", decision.id, {"status": decision.status.value}
        )
        if decision.created_by != user.id:
            await NotificationService(self.session, self.hub).notify(
                decision.created_by,
                NotificationType.decision_resolved,
                "Decision resolved",
                f'"{decision.title}" was marked {decision.status.value}.',
                data={"project_id": decision.project_id, "decision_id": decision.id},
            )
        await self.hub.send_to_project(
            decision.project_id, "decision:resolved", DecisionRead.model_validate(decision).model_dump(mode="json")
        )
        return decision
