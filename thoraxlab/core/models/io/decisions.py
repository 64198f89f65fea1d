"""
Decision I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Dict, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thoraxlab.core.models.domain import (
    ConsensusLevel,
    DecisionOrigin,
    DecisionPriority,
    DecisionStatus,
    DecisionVoteType,
)


class DecisionRead(BaseModel):
    """Schema for reading a decision."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    discussion_id: Optional[str] = None
    title: str
    description: Optional[str] = None
    status: DecisionStatus
    priority: DecisionPriority
    origin: DecisionOrigin
    consensus_level: Optional[ConsensusLevel] = None
    clinical_agreement: Optional[int] = None
    industry_agreement: Optional[int] = None
    created_by: str
    resolved_by: Optional[str] = None
    resolved_at: Optional[datetime] = None
    deadline: Optional[date] = None
    created_at: datetime


class DecisionDetail(DecisionRead):
    """A decision together with its vote tally."""

    votes: Dict[str, int] = Field(default_factory=dict, description="Counts of approve/reject/abstain votes")


class DecisionCreate(BaseModel):
    """Schema for recording a manual decision."""

    title: str = Field(min_length=1, max_length=200)
    priority: DecisionPriority
    description: Optional[str] = Field(default=None, max_length=5000)
    discussion_id: Optional[str] = None
    deadline: Optional[date] = None


class DecisionVoteRequest(BaseModel):
    vote: DecisionVoteType
    comment: Optional[str] = Field(default=None, max_length=1000)


class DecisionResolve(BaseModel):
    status: DecisionStatus

    @field_validator("status")
    @classmethod
    def _final_status(cls, value: DecisionStatus) -> DecisionStatus:
        if value == DecisionStatus.pending:
            raise ValueError("a decision can only be resolved as approved, rejected or deferred")
        return value
