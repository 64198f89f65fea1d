"""Domain enums shared by entities, I/O schemas and services.

These types are shared between:

- SQLModel entities stored in the relational database.
- Pydantic I/O schemas exposed by the API.
- Service-layer rules (permissions, consensus, notifications).
"""

from .enums import (
    ConsensusLevel,
    DecisionOrigin,
    DecisionPriority,
    DecisionStatus,
    DecisionVoteType,
    DiscussionType,
    EvidenceSourceType,
    EvidenceStrength,
    ExportFormat,
    NotificationPriority,
    NotificationType,
    ProjectStatus,
    ProjectType,
    ReactionType,
    SearchType,
    TeamRole,
    UserRole,
    VoteType,
)

__all__ = [
    "ConsensusLevel",
    "DecisionOrigin",
    "DecisionPriority",
    "DecisionStatus",
    "DecisionVoteType",
    "DiscussionType",
    "EvidenceSourceType",
    "EvidenceStrength",
    "ExportFormat",
    "NotificationPriority",
    "NotificationType",
    "ProjectStatus",
    "ProjectType",
    "ReactionType",
    "SearchType",
    "TeamRole",
    "UserRole",
    "VoteType",
]
