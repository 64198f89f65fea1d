"""
Project I/O models for API requests and responses.

This module contains the schemas for project CRUD, team management and the
derived project views (statistics, timeline estimate, similar projects).
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thoraxlab.core.models.domain import ProjectStatus, ProjectType, TeamRole, UserRole


def _clean_tags(tags: Optional[List[str]]) -> Optional[List[str]]:
    if tags is None:
        return None
    seen: List[str] = []
    for tag in tags:
        tag = tag.strip()
        if tag and tag not in seen:
            seen.append(tag)
    return seen


class ProjectRead(BaseModel):
    """Schema for reading a project."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    title: str
    description: str
    status: ProjectStatus
    project_type: ProjectType
    lead_id: str
    template_id: Optional[str] = None
    specialty: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    start_date: Optional[date] = None
    archived_at: Optional[datetime] = None
    created_at: datetime
    updated_at: datetime


class ProjectCreate(BaseModel):
    """Schema for creating a project."""

    title: str = Field(min_length=1, max_length=200)
    description: str = Field(min_length=1, max_length=2000)
    status: ProjectStatus = Field(default=ProjectStatus.planning)
    project_type: ProjectType = Field(default=ProjectType.clinical)
    tags: List[str] = Field(default_factory=list)
    template_id: Optional[str] = Field(default=None, description="Research template identifier")
    specialty: Optional[str] = Field(default=None, max_length=200)
    start_date: Optional[date] = None

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, value):
        return _clean_tags(value)

    @field_validator("status")
    @classmethod
    def _not_archived(cls, value: ProjectStatus) -> ProjectStatus:
        if value == ProjectStatus.archived:
            raise ValueError("a project cannot be created archived")
        return value


class ProjectUpdate(BaseModel):
    """Schema for updating a project. Archiving has its own endpoint."""

    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    description: Optional[str] = Field(default=None, min_length=1, max_length=2000)
    status: Optional[ProjectStatus] = None
    tags: Optional[List[str]] = None
    start_date: Optional[date] = None
    specialty: Optional[str] = Field(default=None, max_length=200)

    @field_validator("tags")
    @classmethod
    def _strip_tags(cls, value):
        return _clean_tags(value)

    @field_validator("status")
    @classmethod
    def _not_archived(cls, value: Optional[ProjectStatus]) -> Optional[ProjectStatus]:
        if value == ProjectStatus.archived:
            raise ValueError("use the archive endpoint to archive a project")
        return value


class TeamMemberRead(BaseModel):
    """A team member: the membership role plus the user's public profile."""

    user_id: str
    name: str
    role: TeamRole
    user_role: UserRole
    institution: Optional[str] = None
    specialty: Optional[str] = None
    avatar_color: str
    joined_at: datetime


class TeamMemberAdd(BaseModel):
    user_id: str
    role: TeamRole = Field(default=TeamRole.contributor)

    @field_validator("role")
    @classmethod
    def _not_lead(cls, value: TeamRole) -> TeamRole:
        if value == TeamRole.lead:
            raise ValueError("a project has exactly one lead")
        return value


class TeamMemberUpdate(BaseModel):
    role: TeamRole

    @field_validator("role")
    @classmethod
    def _not_lead(cls, value: TeamRole) -> TeamRole:
        if value == TeamRole.lead:
            raise ValueError("a project has exactly one lead")
        return value


class ProjectStats(BaseModel):
    """Derived activity statistics of a project."""

    discussion_count: int
    comment_count: int
    vote_count: int
    consensus_score: int
    engagement_score: int
    days_active: int
    team_size: int
    last_activity: Optional[datetime] = None
    pulse_score: int


class Milestone(BaseModel):
    name: str
    completed: bool


class TimelineEstimate(BaseModel):
    """Rough progress estimate based on project status and age."""

    status: ProjectStatus
    phase: str = Field(description="Current milestone")
    progress: int = Field(description="Estimated progress percentage")
    start_date: date
    estimated_end_date: date
    days_remaining: int
    milestones: List[Milestone] = Field(default_factory=list)


class SimilarProject(BaseModel):
    id: str
    title: str
    status: ProjectStatus
    similarity: int = Field(description="Similarity as a percentage")


class ProjectDetail(BaseModel):
    """Full project view returned by ``GET /projects/{id}``."""

    project: ProjectRead
    team: List[TeamMemberRead]
    stats: ProjectStats
    timeline: TimelineEstimate
    similar_projects: List[SimilarProject]
    user_role: Optional[TeamRole] = Field(default=None, description="Team role of the caller, if a member")


class ActivityRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: Optional[str] = None
    project_id: Optional[str] = None
    action: str
    entity_type: Optional[str] = None
    entity_id: Optional[str] = None
    details: dict = Field(default_factory=dict)
    created_at: datetime
