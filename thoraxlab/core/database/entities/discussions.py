"""
Discussion entity models.

This module contains the entities that hang off a project discussion:

- ``Discussion``: a typed, threaded topic inside a project.
- ``DiscussionVote``: one up/down vote per team member and discussion.
- ``EvidenceLink``: external evidence (papers, trials, guidelines) attached to a discussion.
- ``Comment``: threaded replies, with ``CommentReaction`` toggles.
"""

from __future__ import annotations

from datetime import datetime
from typing import List, Optional

from sqlalchemy import JSON, Column
from sqlmodel import Field

from ..base import Base, new_id, utc_now
from thoraxlab.core.models.domain import (
    ConsensusLevel,
    DiscussionType,
    EvidenceSourceType,
    EvidenceStrength,
    ReactionType,
    VoteType,
)


class Discussion(Base, table=True):
    """Threaded topic within a project.

    ``upvotes`` and ``downvotes`` are cached tallies recomputed from
    ``discussion_votes`` after every vote. ``consensus_level`` and
    ``consensus_score`` hold the last evaluated consensus.

    Table: discussions
    """

    __tablename__ = "discussions"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    project_id: str = Field(foreign_key="projects.id", index=True, ondelete="CASCADE")
    author_id: str = Field(foreign_key="users.id", index=True)
    title: str = Field(max_length=200)
    content: str = Field(max_length=5000)
    discussion_type: DiscussionType = Field(default=DiscussionType.brainstorm, index=True)
    tags: List[str] = Field(default_factory=list, sa_column=Column(JSON, nullable=False))

    upvotes: int = Field(default=0)
    downvotes: int = Field(default=0)
    consensus_level: ConsensusLevel = Field(default=ConsensusLevel.pending)
    consensus_score: Optional[int] = Field(default=None)
    is_resolved: bool = Field(default=False)
    view_count: int = Field(default=0)

    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Discussion(id={self.id}, type={self.discussion_type}, project_id={self.project_id})"


class DiscussionVote(Base, table=True):
    """A single team member's vote on a discussion.

    Table: discussion_votes
    """

    __tablename__ = "discussion_votes"
    __table_args__ = ({"extend_existing": True},)

    discussion_id: str = Field(foreign_key="discussions.id", primary_key=True, ondelete="CASCADE")
    user_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    vote: VoteType
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)


class EvidenceLink(Base, table=True):
    """External evidence attached to a discussion.

    Table: evidence_links
    """

    __tablename__ = "evidence_links"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    discussion_id: str = Field(foreign_key="discussions.id", index=True, ondelete="CASCADE")
    added_by: str = Field(foreign_key="users.id")
    url: str = Field(max_length=2048)
    title: str = Field(max_length=300)
    source_type: EvidenceSourceType = Field(default=EvidenceSourceType.other)
    strength: EvidenceStrength = Field(default=EvidenceStrength.moderate)
    summary: Optional[str] = Field(default=None, max_length=2000)
    created_at: datetime = Field(default_factory=utc_now)


class Comment(Base, table=True):
    """Comment on a discussion; ``parent_id`` makes it a reply.

    Table: comments
    """

    __tablename__ = "comments"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    discussion_id: str = Field(foreign_key="discussions.id", index=True, ondelete="CASCADE")
    author_id: str = Field(foreign_key="users.id", index=True)
    parent_id: Optional[str] = Field(default=None, foreign_key="comments.id", ondelete="CASCADE")
    content: str = Field(max_length=1000)
    is_edited: bool = Field(default=False)
    created_at: datetime = Field(default_factory=utc_now, index=True)
    updated_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"Comment(id={self.id}, discussion_id={self.discussion_id}, parent_id={self.parent_id})"


class CommentReaction(Base, table=True):
    """A reaction toggled by a user on a comment.

    Table: comment_reactions
    """

    __tablename__ = "comment_reactions"
    __table_args__ = ({"extend_existing": True},)

    comment_id: str = Field(foreign_key="comments.id", primary_key=True, ondelete="CASCADE")
    user_id: str = Field(foreign_key="users.id", primary_key=True, ondelete="CASCADE")
    reaction: ReactionType = Field(primary_key=True)
    created_at: datetime = Field(default_factory=utc_now)
