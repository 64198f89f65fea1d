"""
Project and platform metrics.

The scoring functions are pure so they can be tested with plain numbers:

- ``consensus_score``: share of up-votes among all votes (75 without votes)
- ``engagement_score``: discussions x10 + comments x5 + votes x2, capped at 100
- ``pulse_score``: 50 plus engagement, diversity, progress and recency bonuses
  computed over the last 7 days, clamped to 0-100
- ``estimate_timeline``: status-based progress estimate with milestones
- ``project_similarity``: weighted tag/specialty/template/lead overlap

``MetricsService`` gathers the inputs from the database.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime, timedelta
from typing import List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Project
from thoraxlab.core.database.repositories.activity_log import ActivityLogRepository
from thoraxlab.core.database.repositories.comments import CommentRepository
from thoraxlab.core.database.repositories.decisions import DecisionRepository
from thoraxlab.core.database.repositories.discussions import DiscussionRepository, DiscussionVoteRepository
from thoraxlab.core.database.repositories.projects import ProjectRepository, ProjectTeamRepository
from thoraxlab.core.database.repositories.users import UserRepository
from thoraxlab.core.models.domain import DecisionStatus, ProjectStatus, UserRole
from thoraxlab.core.models.io import (
    ActivityRead,
    DetailedAnalytics,
    InstitutionShare,
    Milestone,
    PlatformStats,
    ProjectStats,
    SimilarProject,
    TimelineEstimate,
)

DEFAULT_CONSENSUS = 75
SIMILARITY_THRESHOLD = 0.3

PLANNING_MILESTONES = (
    (30, "Initial Planning"),
    (60, "Protocol Development"),
    (90, "Ethics Approval"),
    (101, "Ready to Start"),
)
ACTIVE_MILESTONES = (
    (25, "Patient Recruitment"),
    (50, "Data Collection"),
    (75, "Intervention Phase"),
    (90, "Follow-up Phase"),
    (101, "Analysis Phase"),
)

# status -> (estimated duration in days, progress weight)
_TIMELINE_ESTIMATES = {
    ProjectStatus.planning: (90, 0.3),
    ProjectStatus.active: (180, 0.7),
    ProjectStatus.review: (180, 0.7),
}


def consensus_score(upvotes: int, downvotes: int) -> int:
    total = upvotes + downvotes
    return round(upvotes / total * 100) if total else DEFAULT_CONSENSUS


def engagement_score(discussions: int, comments: int, votes: int) -> int:
    return min(discussions * 10 + comments * 5 + votes * 2, 100)


@dataclass
class PulseInputs:
    """Project activity over the last 7 days."""

    activity: int = 0
    comments: int = 0
    decisions: int = 0
    approved_decisions: int = 0
    unique_actors: int = 0
    has_clinician: bool = False
    has_industry: bool = False
    last_activity: Optional[datetime] = None


def pulse_score(inputs: PulseInputs, now: Optional[datetime] = None) -> int:
    """
    Score how alive a project is, from 0 to 100.

    Base 50, plus:

    - engagement (max 40): activity x0.5 + comments x2 + decisions x3
    - diversity (max 30): unique actors x4, +5 with a clinician, +5 with an industry member
    - progress (max 20): approved decisions x5
    - recency: +10 under 1h, +8 under 6h, +5 under 24h, +2 under 72h since the last activity
    """
    now = now or utc_now()
    score = 50.0
    score += min(inputs.activity * 0.5 + inputs.comments * 2 + inputs.decisions * 3, 40)
    score += min(inputs.unique_actors * 4 + (5 if inputs.has_clinician else 0) + (5 if inputs.has_industry else 0), 30)
    score += min(inputs.approved_decisions * 5, 20)
    if inputs.last_activity is not None:
        hours = (now - inputs.last_activity).total_seconds() / 3600
        if hours < 1:
            score += 10
        elif hours < 6:
            score += 8
        elif hours < 24:
            score += 5
        elif hours < 72:
            score += 2
    return max(0, min(100, round(score)))


def _milestones(status: ProjectStatus, progress: int) -> tuple[str, List[Milestone]]:
    if status == ProjectStatus.completed:
        return "Completed", [Milestone(name=name, completed=True) for _, name in ACTIVE_MILESTONES]
    if status == ProjectStatus.planning:
        table = PLANNING_MILESTONES
    elif status in (ProjectStatus.active, ProjectStatus.review):
        table = ACTIVE_MILESTONES
    else:
        return "In Progress", []
    current = next(name for bound, name in table if progress < bound)
    milestones = []
    reached = True
    for _, name in table:
        if name == current:
            reached = False
        milestones.append(Milestone(name=name, completed=reached))
    return current, milestones


def estimate_timeline(project: Project, now: Optional[datetime] = None) -> TimelineEstimate:
    """
    Estimate a project's progress from its status and age.

    Planning projects are expected to take 90 days and count for 30% of the
    progress bar; active and review projects 180 days and 70%. Progress stays
    below 100 until the project is completed.
    """
    now = now or utc_now()
    start = project.start_date or project.created_at.date()

    if project.status == ProjectStatus.completed:
        phase, milestones = _milestones(project.status, 100)
        return TimelineEstimate(
            status=project.status,
            phase=phase,
            progress=100,
            start_date=start,
            estimated_end_date=project.updated_at.date(),
            days_remaining=0,
            milestones=milestones,
        )

    duration, weight = _TIMELINE_ESTIMATES.get(project.status, _TIMELINE_ESTIMATES[ProjectStatus.planning])
    end = start + timedelta(days=duration)
    remaining = max(0, (end - now.date()).days)
    elapsed = duration - remaining
    progress = min(99, max(0, round(elapsed / duration * 100 * weight)))
    phase, milestones = _milestones(project.status, progress)
    return TimelineEstimate(
        status=project.status,
        phase=phase,
        progress=progress,
        start_date=start,
        estimated_end_date=end,
        days_remaining=remaining,
        milestones=milestones,
    )


def project_similarity(a: Project, b: Project) -> float:
    """Similarity in [0, 1]: 0.4 tag Jaccard + 0.3 specialty + 0.2 template + 0.1 lead."""
    score = 0.0
    tags_a = {t.lower() for t in (a.tags or [])}
    tags_b = {t.lower() for t in (b.tags or [])}
    union = tags_a | tags_b
    if union:
        score += len(tags_a & tags_b) / len(union) * 0.4
    if a.specialty and b.specialty and a.specialty.lower() == b.specialty.lower():
        score += 0.3
    if a.template_id and a.template_id == b.template_id:
        score += 0.2
    if a.lead_id == b.lead_id:
        score += 0.1
    return score


class MetricsService:
    """Computes project statistics and platform analytics."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.projects = ProjectRepository(session)
        self.team = ProjectTeamRepository(session)
        self.discussions = DiscussionRepository(session)
        self.discussion_votes = DiscussionVoteRepository(session)
        self.comments = CommentRepository(session)
        self.decisions = DecisionRepository(session)
        self.activity = ActivityLogRepository(session)
        self.users = UserRepository(session)

    async def pulse_inputs(self, project_id: str, now: datetime) -> PulseInputs:
        since = now - timedelta(days=7)
        actor_ids = await self.activity.actors_for_project(project_id, since)
        actors = await self.users.list_by_ids(actor_ids)
        return PulseInputs(
            activity=await self.activity.count_for_project(project_id, since),
            comments=await self.comments.count_for_project(project_id, since),
            decisions=await self.decisions.count_for_project(project_id, since),
            approved_decisions=await self.decisions.count_for_project(project_id, since, DecisionStatus.approved),
            unique_actors=len(actors),
            has_clinician=any(u.role == UserRole.clinician for u in actors),
            has_industry=any(u.role == UserRole.industry for u in actors),
            last_activity=await self.activity.last_for_project(project_id),
        )

    async def project_stats(self, project: Project, now: Optional[datetime] = None) -> ProjectStats:
        now = now or utc_now()
        discussion_count = await self.discussions.count_for_project(project.id)
        comment_count = await self.comments.count_for_project(project.id)
        up, down = await self.discussions.vote_totals(project.id)
        inputs = await self.pulse_inputs(project.id, now)
        return ProjectStats(
            discussion_count=discussion_count,
            comment_count=comment_count,
            vote_count=up + down,
            consensus_score=consensus_score(up, down),
            engagement_score=engagement_score(discussion_count, comment_count, up + down),
            days_active=max(0, (now - project.created_at).days),
            team_size=await self.team.count_team(project.id),
            last_activity=inputs.last_activity,
            pulse_score=pulse_score(inputs, now),
        )

    async def similar_projects(self, project: Project, limit: int = 3) -> List[SimilarProject]:
        """Non-archived projects with similarity above 0.3, most similar first."""
        scored = []
        for other in await self.projects.list_visible():
            if other.id == project.id:
                continue
            similarity = project_similarity(project, other)
            if similarity > SIMILARITY_THRESHOLD:
                scored.append((similarity, other))
        scored.sort(key=lambda item: item[0], reverse=True)
        return [
            SimilarProject(id=other.id, title=other.title, status=other.status, similarity=round(similarity * 100))
            for similarity, other in scored[:limit]
        ]

    async def platform_stats(self) -> PlatformStats:
        by_status = await self.projects.count_by_status()
        up, down = await self.discussions.vote_totals()
        sizes = list((await self.team.team_sizes()).values())
        return PlatformStats(
            total_projects=sum(count for status, count in by_status.items() if status != ProjectStatus.archived.value),
            active_projects=by_status.get(ProjectStatus.active.value, 0),
            completed_projects=by_status.get(ProjectStatus.completed.value, 0),
            total_users=await self.users.count(),
            total_discussions=await self.discussions.count_visible(),
            total_comments=await self.comments.count_visible(),
            consensus_rate=consensus_score(up, down),
            average_team_size=round(sum(sizes) / len(sizes), 1) if sizes else 0.0,
        )

    async def detailed(self, now: Optional[datetime] = None) -> DetailedAnalytics:
        """The authenticated analytics dashboard."""
        now = now or utc_now()
        stats = await self.platform_stats()
        total_users = stats.total_users
        institutions = [
            InstitutionShare(
                institution=name,
                count=count,
                percentage=round(count / total_users * 100) if total_users else 0,
            )
            for name, count in await self.users.top_institutions(10)
        ]
        voters = await self.discussion_votes.count_distinct_voters()
        return DetailedAnalytics(
            stats=stats,
            users_by_role=await self.users.count_by_role(),
            top_institutions=institutions,
            projects_by_status=await self.projects.count_by_status(),
            projects_by_template=await self.projects.count_by_template(),
            avg_discussions_per_project=(
                round(stats.total_discussions / stats.total_projects, 1) if stats.total_projects else 0.0
            ),
            avg_comments_per_discussion=(
                round(stats.total_comments / stats.total_discussions, 1) if stats.total_discussions else 0.0
            ),
            vote_participation=round(voters / total_users * 100) if total_users else 0,
            active_researchers=await self.users.count_seen_since(now - timedelta(days=30)),
            recent_activity=[
                ActivityRead.model_validate(entry).model_dump(mode="json") for entry in await self.activity.recent(50)
            ],
        )
