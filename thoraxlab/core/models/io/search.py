"""
Search, template, medical calculator and analytics I/O models.
"""

from __future__ import annotations

from datetime import datetime
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from thoraxlab.core.models.domain import ProjectStatus, SearchType, UserRole


class ProjectHit(BaseModel):
    id: str
    title: str
    description: str = Field(description="Description truncated to 150 characters")
    status: ProjectStatus
    tags: List[str] = Field(default_factory=list)
    relevance: int


class DiscussionHit(BaseModel):
    id: str
    project_id: str
    title: str
    content: str = Field(description="Content truncated to 200 characters")
    created_at: datetime


class UserHit(BaseModel):
    id: str
    name: str
    role: UserRole
    institution: Optional[str] = None
    specialty: Optional[str] = None


class SearchResults(BaseModel):
    projects: List[ProjectHit] = Field(default_factory=list)
    discussions: List[DiscussionHit] = Field(default_factory=list)
    users: List[UserHit] = Field(default_factory=list)


class SearchResponse(BaseModel):
    query: str
    type: SearchType
    results: SearchResults
    counts: Dict[str, int]


class ResearchTemplate(BaseModel):
    """A research project template from the static catalogue."""

    id: str
    name: str
    description: str
    category: str
    required_fields: List[str]
    optional_fields: List[str]
    medical_fields: List[str]
    validation_rules: Dict[str, Dict[str, int]] = Field(default_factory=dict)


class CalculationRequest(BaseModel):
    type: str = Field(description="gold-stage, bode-index or ards-net")
    data: Dict[str, Any] = Field(default_factory=dict)


class CalculationResponse(BaseModel):
    type: str
    data: Dict[str, Any]
    result: Dict[str, Any]
    timestamp: datetime


class PlatformStats(BaseModel):
    """Public platform totals."""

    total_projects: int
    active_projects: int
    completed_projects: int
    total_users: int
    total_discussions: int
    total_comments: int
    consensus_rate: int
    average_team_size: float


class InstitutionShare(BaseModel):
    institution: str
    count: int
    percentage: int


class DetailedAnalytics(BaseModel):
    """Authenticated analytics dashboard."""

    stats: PlatformStats
    users_by_role: Dict[str, int]
    top_institutions: List[InstitutionShare]
    projects_by_status: Dict[str, int]
    projects_by_template: Dict[str, int]
    avg_discussions_per_project: float
    avg_comments_per_discussion: float
    vote_participation: int
    active_researchers: int
    recent_activity: List[Dict[str, Any]]


class StatusResponse(BaseModel):
    users: int
    projects: int
    active_sessions: int
    realtime_connections: int
    uptime_seconds: int
