"""
Consensus calculation.

Consensus is a percentage tally of the votes cast by the current members of a
project team, split by professional background:

- ``clinical_agreement``: up-votes by clinicians / clinicians on the team
- ``industry_agreement``: up-votes by industry members / industry members on the team
- ``overall_agreement``: up-votes / team size
- ``participation``: votes cast / team size

The level is ``pending`` while nobody has voted. Otherwise the lowest
agreement among the represented roles (or the overall agreement when neither
role is on the team) is compared with the configured thresholds.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Mapping, Optional, Sequence, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Decision, Discussion
from thoraxlab.core.database.repositories.decisions import DecisionRepository
from thoraxlab.core.database.repositories.discussions import DiscussionVoteRepository
from thoraxlab.core.database.repositories.projects import ProjectTeamRepository
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.domain import (
    ConsensusLevel,
    DecisionOrigin,
    DecisionPriority,
    DecisionStatus,
    DiscussionType,
    NotificationPriority,
    NotificationType,
    UserRole,
    VoteType,
)
from thoraxlab.core.models.io import ConsensusRead, DecisionRead
from thoraxlab.core.monitoring import log_consensus_reached
from thoraxlab.server.core.config import settings
from thoraxlab.server.services.notifications import NotificationService
from thoraxlab.server.services.realtime import RealtimeHub, get_hub

logger = get_logger(__name__)


@dataclass(frozen=True)
class Thresholds:
    medium: int = 50
    high: int = 75


def _percent(part: int, whole: int) -> int:
    return round(part / whole * 100) if whole else 0


def level_for(agreement: int, thresholds: Thresholds) -> ConsensusLevel:
    if agreement >= thresholds.high:
        return ConsensusLevel.high
    if agreement >= thresholds.medium:
        return ConsensusLevel.medium
    return ConsensusLevel.low


def compute_consensus(
    team: Sequence[Tuple[str, UserRole]],
    votes: Mapping[str, VoteType],
    thresholds: Optional[Thresholds] = None,
) -> ConsensusRead:
    """
    Tally votes of the current team into a consensus.

    Votes from users who are not on ``team`` are ignored, so every count is
    bounded by the team size.

    Args:
        team: (user_id, user role) pairs of the current team members
        votes: Vote per user id
        thresholds: Level thresholds; the configured ones when None

    Returns:
        ConsensusRead with counts, percentages and the level
    """
    thresholds = thresholds or Thresholds(settings.consensus.medium_threshold, settings.consensus.high_threshold)
    roles: Dict[str, UserRole] = dict(team)
    counted = {user_id: vote for user_id, vote in votes.items() if user_id in roles}

    up = sum(1 for vote in counted.values() if vote == VoteType.up)
    down = len(counted) - up
    team_size = len(roles)

    def by_role(role: UserRole) -> Tuple[int, int, int]:
        members = [user_id for user_id, r in roles.items() if r == role]
        role_up = sum(1 for user_id in members if counted.get(user_id) == VoteType.up)
        role_votes = sum(1 for user_id in members if user_id in counted)
        return len(members), role_up, role_votes

    clinical_size, clinical_up, clinical_votes = by_role(UserRole.clinician)
    industry_size, industry_up, industry_votes = by_role(UserRole.industry)
    clinical = _percent(clinical_up, clinical_size) if clinical_size else None
    industry = _percent(industry_up, industry_size) if industry_size else None
    overall = _percent(up, team_size)

    if not counted:
        level = ConsensusLevel.pending
    else:
        present = [value for value in (clinical, industry) if value is not None]
        level = level_for(min(present) if present else overall, thresholds)

    return ConsensusRead(
        level=level,
        upvotes=up,
        downvotes=down,
        total_votes=up + down,
        team_size=team_size,
        clinical_agreement=clinical,
        industry_agreement=industry,
        overall_agreement=overall,
        participation=_percent(up + down, team_size),
        clinical_votes=clinical_votes,
        industry_votes=industry_votes,
    )


class ConsensusService:
    """Evaluates discussion consensus and records consensus decisions."""

    def __init__(self, session: AsyncSession, hub: Optional[RealtimeHub] = None):
        self.session = session
        self.hub = hub or get_hub()
        self.team = ProjectTeamRepository(session)
        self.votes = DiscussionVoteRepository(session)
        self.decisions = DecisionRepository(session)

    async def consensus_for(self, discussion: Discussion) -> ConsensusRead:
        team = [(user.id, user.role) for _, user in await self.team.list_team(discussion.project_id)]
        votes = {vote.user_id: vote.vote for vote in await self.votes.list_for_discussion(discussion.id)}
        return compute_consensus(team, votes)

    async def evaluate(self, discussion: Discussion, actor_id: str) -> Tuple[ConsensusRead, Optional[Decision]]:
        """
        Recompute and store the consensus of a discussion.

        A ``decision`` discussion that reaches high consensus for the first
        time produces an approved Decision with ``origin=consensus``. Team
        members are notified and ``decision:created`` is broadcast. The
        decision is never removed if consensus later drops.

        Args:
            discussion: Discussion whose votes changed
            actor_id: User whose vote triggered the evaluation

        Returns:
            Tuple of (consensus, decision created by this evaluation or None)
        """
        consensus = await self.consensus_for(discussion)
        discussion.consensus_level = consensus.level
        discussion.consensus_score = (
            _percent(consensus.upvotes, consensus.total_votes) if consensus.total_votes else None
        )
        self.session.add(discussion)
        await self.session.commit()

        if discussion.discussion_type != DiscussionType.decision or consensus.level != ConsensusLevel.high:
            return consensus, None
        if await self.decisions.get_by_discussion(discussion.id) is not None:
            return consensus, None

        decision = await self.decisions.create(
            Decision(
                project_id=discussion.project_id,
                discussion_id=discussion.id,
                title=discussion.title,
                description=discussion.content,
                status=DecisionStatus.approved,
                priority=DecisionPriority.medium,
                origin=DecisionOrigin.consensus,
                consensus_level=consensus.level,
                clinical_agreement=consensus.clinical_agreement,
                industry_agreement=consensus.industry_agreement,
                created_by=actor_id,
                resolved_by=actor_id,
                resolved_at=utc_now(),
            )
        )
        logger.info(f"Consensus reached on discussion {discussion.id}; created decision {decision.id}")
        log_consensus_reached(discussion.project_id, discussion.id, consensus.level.value, decision.id)

        member_ids = [member.user_id for member, _ in await self.team.list_team(discussion.project_id)]
        await NotificationService(self.session, self.hub).notify_many(
            member_ids,
            NotificationType.consensus_reached,
            "Consensus reached",
            f'The team reached high consensus on "{discussion.title}".',
            data={"project_id": discussion.project_id, "discussion_id": discussion.id, "decision_id": decision.id},
            priority=NotificationPriority.high,
        )
        await self.hub.send_to_project(
            discussion.project_id,
            "decision:created",
            DecisionRead.model_validate(decision).model_dump(mode="json"),
        )
        return consensus, decision
