"""
Discussion I/O models for API requests and responses.

This module contains the schemas for discussions and everything attached to
them: votes and consensus, evidence links, comments and reactions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thoraxlab.core.models.domain import (
    ConsensusLevel,
    DiscussionType,
    EvidenceSourceType,
    EvidenceStrength,
    ReactionType,
    VoteType,
)


class DiscussionRead(BaseModel):
    """Schema for reading a discussion."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    project_id: str
    author_id: str
    title: str
    content: str
    discussion_type: DiscussionType
    tags: List[str] = Field(default_factory=list)
    upvotes: int
    downvotes: int
    consensus_level: ConsensusLevel
    consensus_score: Optional[int] = None
    is_resolved: bool
    view_count: int
    created_at: datetime
    updated_at: datetime


class DiscussionCreate(BaseModel):
    """Schema for starting a discussion."""

    title: str = Field(min_length=1, max_length=200)
    content: str = Field(min_length=1, max_length=5000)
    discussion_type: DiscussionType = Field(default=DiscussionType.brainstorm)
    tags: List[str] = Field(default_factory=list)


class DiscussionUpdate(BaseModel):
    title: Optional[str] = Field(default=None, min_length=1, max_length=200)
    content: Optional[str] = Field(default=None, min_length=1, max_length=5000)
    tags: Optional[List[str]] = None
    is_resolved: Optional[bool] = None


class VoteRequest(BaseModel):
    vote: VoteType


class ConsensusRead(BaseModel):
    """Consensus of a discussion, tallied over current team members.

    Role agreements are ``None`` when the team has no member of that role.
    """

    level: ConsensusLevel
    upvotes: int
    downvotes: int
    total_votes: int
    team_size: int
    clinical_agreement: Optional[int] = None
    industry_agreement: Optional[int] = None
    overall_agreement: int
    participation: int
    clinical_votes: int = 0
    industry_votes: int = 0


class VoteResult(BaseModel):
    """Outcome of a vote, also broadcast as ``discussion:vote:update``."""

    discussion_id: str
    upvotes: int
    downvotes: int
    user_vote: Optional[VoteType] = None
    total_votes: int
    consensus: ConsensusRead
    decision_id: Optional[str] = Field(default=None, description="Decision created by this vote, if any")


class EvidenceRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    discussion_id: str
    added_by: str
    url: str
    title: str
    source_type: EvidenceSourceType
    strength: EvidenceStrength
    summary: Optional[str] = None
    created_at: datetime


class EvidenceCreate(BaseModel):
    """Schema for attaching evidence to a discussion."""

    url: str = Field(max_length=2048)
    title: str = Field(max_length=300)
    source_type: EvidenceSourceType = Field(default=EvidenceSourceType.other)
    strength: EvidenceStrength = Field(default=EvidenceStrength.moderate)
    summary: Optional[str] = Field(default=None, max_length=2000)

    @field_validator("url")
    @classmethod
    def _http_url(cls, value: str) -> str:
        value = value.strip()
        if not value.lower().startswith(("http://", "https://")):
            raise ValueError("url must start with http:// or https://")
        return value

    @field_validator("title")
    @classmethod
    def _title_required(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("title is required")
        return value


class CommentRead(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: str
    discussion_id: str
    author_id: str
    parent_id: Optional[str] = None
    content: str
    is_edited: bool
    created_at: datetime
    updated_at: datetime
    reactions: Dict[str, int] = Field(default_factory=dict)


class CommentCreate(BaseModel):
    content: str = Field(min_length=1, max_length=1000)
    parent_id: Optional[str] = None


class CommentUpdate(BaseModel):
    content: str = Field(min_length=1, max_length=1000)


class ReactionRequest(BaseModel):
    reaction: ReactionType


class ReactionResult(BaseModel):
    comment_id: str
    reaction: ReactionType
    active: bool = Field(description="Whether the caller's reaction is now set")
    reactions: Dict[str, int]


class DiscussionDetail(BaseModel):
    """Full discussion view returned by ``GET /discussions/{id}``."""

    discussion: DiscussionRead
    comments: List[CommentRead]
    evidence: List[EvidenceRead]
    consensus: ConsensusRead
    user_vote: Optional[VoteType] = None
