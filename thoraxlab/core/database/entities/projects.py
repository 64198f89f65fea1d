"""
Project and team entity models.

A project is a research collaboration owned by a lead user. Team membership
is stored in ``project_team`` with one row per (project, user) pair; the row's
role decides what the member may do inside the project.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now
from thoraxlab.core.models.domain import ProjectStatus, ProjectType, TeamRole


class Project(Base, table=True):
    """Research collaboration record.

    Table: projects
    """

    __tablename__ = "projects"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    title: str = Field(max_length=200)
    description: str = Field(max_length=2000)
    status: ProjectStatus = Field(default=ProjectStatus.planning, index=True)
    project_type: ProjectType = Field(default=ProjectType.clinical)
    lead_id: str = Field(foreign_key="users.id", index=True)
    template_id: Optional[str] = Field(default=None, max_length=64, index=True)
    specialty: Optional[str] = Field(default=None, max_length=200)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))
    start_date: Optional[date] = Field(default=None)
    archived_at: Optional[datetime] = Field(default=None)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now, index=True)

    @property
    def is_archived(self) -> bool:
        return self.status == ProjectStatus.archived

    def __repr__(self) -> str:
        return f"Project(id={self.id}, title={self.title}, status={self.status})"


class ProjectTeamMember(Base, table=True):
    """Membership of a user in a project team.

    Table: project_team
    """

    __tablename__ = "project_team"
    __table_args__ = ({"extend_existing": True},)

    project_id: str = Field(foreign_key="projects.id", primary_key=True, ondelete="CASCADE")
    user_id: str = Field(foreign_key="users.id", primary_key=True, index=True, ondelete="CASCADE")
    role: TeamRole = Field(default=TeamRole.contributor)
    joined_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"ProjectTeamMember(project_id={self.project_id}, user_id={self.user_id}, role={self.role})"
