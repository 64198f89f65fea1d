"""
Decision entity models.

Decisions are recorded either automatically, once a decision discussion
reaches high consensus, or manually by a project lead. Each decision can be
voted on by the team and is eventually resolved.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now
from thoraxlab.core.models.domain import (
    ConsensusLevel,
    DecisionOrigin,
    DecisionPriority,
    DecisionStatus,
    DecisionVoteType,
)


class Decision(Base, table=True):
    """Decision taken by a project team.

    ``discussion_id`` is unique so a discussion yields at most one decision.
    The consensus columns keep a snapshot of the tally at creation time.

    Table: decisions
    """

    __tablename__ = "decisions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    project_id: str = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    discussion_id: Optional[str] = Field(
        default=None, foreign_key="discussions.id", unique=True, ondelete="SET NULL"
    )
    title: str = Field(max_length=200)
    description: Optional[str] = Field(default=None, max_length=5000)
    status: DecisionStatus = Field(default=DecisionStatus.pending, index=True)
    priority: DecisionPriority = Field(default=DecisionPriority.medium)
    origin: DecisionOrigin = Field(default=DecisionOrigin.manual)

    consensus_level: Optional[ConsensusLevel] = Field(default=None)
    clinical_agreement: Optional[int] = Field(default=None)
    industry_agreement: Optional[int] = Field(default=None)

    created_by: str = Field(foreign_key="users.id")
    resolved_by: Optional[str] = Field(default=None, foreign_key="users.id")
    resolved_at: Optional[datetime] = Field(default=None)
    deadline: Optional[date] = Field(default=None)
    created_at: datetime = Field(default_factory=utc_now, index=True)

    def __repr__(self) -> str:
        return f"Decision(id={self.id}, status={self.status}, origin={self.origin})"


class DecisionVote(Base, table=True):
    """A team member's vote on a decision.

    Table: decision_votes
    """

    __tablename__ = "decision_votes"
    __table_args__ = ({"extend_existing": True},)

    decision_id: str = Field(foreign_key="decisions.id", primary_key=True, ondelete="CASCADE")
    user_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    vote: DecisionVoteType
    comment: Optional[str] = Field(default=None, max_length=1000)
    created_at: datetime = Field(default_factory=utc_now)
