"""
Full-text search over projects, discussions and users.

Projects match when every query term occurs somewhere in their title,
description, tags, specialty or lead name, and are ranked by a relevance
score. Discussions and users use a simple substring match.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Project
from thoraxlab.core.database.repositories.discussions import DiscussionRepository
from thoraxlab.core.database.repositories.projects import ProjectRepository, ProjectTeamRepository
from thoraxlab.core.database.repositories.users import UserRepository
from thoraxlab.core.errors import ValidationError
from thoraxlab.core.models.domain import ProjectStatus, SearchType
from thoraxlab.core.models.io import DiscussionHit, ProjectHit, SearchResponse, SearchResults, UserHit

MIN_QUERY_LENGTH = 2


def truncate(text: Optional[str], length: int) -> str:
    text = text or ""
    return text if len(text) <= length else text[:length] + "..."


def project_relevance(
    project: Project,
    terms: List[str],
    discussion_count: int,
    team_size: int,
    now: Optional[datetime] = None,
) -> int:
    """
    Relevance of a matching project for the given (lowercased) terms.

    - title: +50 per term it contains, +100 when it equals a term
    - tags: +30 per term found in any tag
    - description: +10 per term it contains
    - recency: +25 when under 7 days old, +15 under 30
    - activity: +20 with more than 5 discussions, +15 with more than 3 members
    - status: active +10, completed +5
    """
    now = now or utc_now()
    title = project.title.lower()
    description = project.description.lower()
    tags = [t.lower() for t in (project.tags or [])]

    score = 0
    for term in terms:
        if term in title:
            score += 50
        if title == term:
            score += 100
        if any(term in tag for tag in tags):
            score += 30
        if term in description:
            score += 10

    age_days = (now - project.created_at).days
    if age_days < 7:
        score += 25
    elif age_days < 30:
        score += 15

    if discussion_count > 5:
        score += 20
    if team_size > 3:
        score += 15

    if project.status == ProjectStatus.active:
        score += 10
    elif project.status == ProjectStatus.completed:
        score += 5
    return score


class SearchService:
    """Searches the visible (non-archived) content of the platform."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.projects = ProjectRepository(session)
        self.team = ProjectTeamRepository(session)
        self.discussions = DiscussionRepository(session)
        self.users = UserRepository(session)

    async def search_projects(self, terms: List[str], limit: int) -> List[ProjectHit]:
        projects = await self.projects.list_visible()
        leads = {u.id: u for u in await self.users.list_by_ids(p.lead_id for p in projects)}
        discussion_counts = await self.discussions.counts_by_project()
        team_sizes = await self.team.team_sizes()
        now = utc_now()

        hits = []
        for project in projects:
            lead = leads.get(project.lead_id)
            haystack = " ".join(
                [
                    project.title,
                    project.description,
                    " ".join(project.tags or []),
                    project.specialty or "",
                    lead.name if lead else "",
                ]
            ).lower()
            if not all(term in haystack for term in terms):
                continue
            relevance = project_relevance(
                project, terms, discussion_counts.get(project.id, 0), team_sizes.get(project.id, 0), now
            )
            hits.append(
                ProjectHit(
                    id=project.id,
                    title=project.title,
                    description=truncate(project.description, 150),
                    status=project.status,
                    tags=project.tags or [],
                    relevance=relevance,
                )
            )
        hits.sort(key=lambda hit: hit.relevance, reverse=True)
        return hits[:limit]

    async def search(self, query: str, search_type: SearchType = SearchType.all, limit: int = 10) -> SearchResponse:
        """
        Search the platform.

        Raises:
            ValidationError: If the trimmed query is shorter than 2 characters
        """
        query = (query or "").strip()
        if len(query) < MIN_QUERY_LENGTH:
            raise ValidationError(f"Search query must be at least {MIN_QUERY_LENGTH} characters")
        terms = [term for term in query.lower().split() if term]

        results = SearchResults()
        if search_type in (SearchType.all, SearchType.projects):
            results.projects = await self.search_projects(terms, limit)
        if search_type in (SearchType.all, SearchType.discussions):
            results.discussions = [
                DiscussionHit(
                    id=d.id,
                    project_id=d.project_id,
                    title=d.title,
                    content=truncate(d.content, 200),
                    created_at=d.created_at,
                )
                for d in await self.discussions.search(query, limit)
            ]
        if search_type in (SearchType.all, SearchType.users):
            results.users = [
                UserHit(id=u.id, name=u.name, role=u.role, institution=u.institution, specialty=u.specialty)
                for u in await self.users.search(query, limit)
            ]

        counts: Dict[str, int] = {
            "projects": len(results.projects),
            "discussions": len(results.discussions),
            "users": len(results.users),
        }
        counts["total"] = sum(counts.values())
        return SearchResponse(query=query, type=search_type, results=results, counts=counts)
