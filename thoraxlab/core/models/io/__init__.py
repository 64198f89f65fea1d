"""
I/O models for API requests and responses.

This package contains Pydantic-based I/O schemas that define the contract
between API endpoints and clients. These models are separate from database
entities to allow independent evolution of API contracts.

Modules:
- common: Pagination, realtime envelope and error envelope
- users: Users, login and profile models
- projects: Projects, team, statistics and timeline models
- discussions: Discussions, votes, consensus, evidence and comments
- decisions: Decisions and decision votes
- notifications: Notification inbox models
- search: Search, templates, medical calculators and analytics
"""

from .common import ErrorResponse, Page, Pagination, RealtimeMessage
from .decisions import (
    DecisionCreate,
    DecisionDetail,
    DecisionRead,
    DecisionResolve,
    DecisionVoteRequest,
)
from .discussions import (
    CommentCreate,
    CommentRead,
    CommentUpdate,
    ConsensusRead,
    DiscussionCreate,
    DiscussionDetail,
    DiscussionRead,
    DiscussionUpdate,
    EvidenceCreate,
    EvidenceRead,
    ReactionRequest,
    ReactionResult,
    VoteRequest,
    VoteResult,
)
from .notifications import MarkAllReadResult, NotificationList, NotificationRead
from .projects import (
    ActivityRead,
    Milestone,
    ProjectCreate,
    ProjectDetail,
    ProjectRead,
    ProjectStats,
    ProjectUpdate,
    SimilarProject,
    TeamMemberAdd,
    TeamMemberRead,
    TeamMemberUpdate,
    TimelineEstimate,
)
from .search import (
    CalculationRequest,
    CalculationResponse,
    DetailedAnalytics,
    DiscussionHit,
    InstitutionShare,
    PlatformStats,
    ProjectHit,
    ResearchTemplate,
    SearchResponse,
    SearchResults,
    StatusResponse,
    UserHit,
)
from .users import (
    CurrentUserRead,
    LoginRequest,
    LoginResponse,
    UserPublic,
    UserRead,
    UserUpdate,
)

__all__ = [
    "ActivityRead",
    "CalculationRequest",
    "CalculationResponse",
    "CommentCreate",
    "CommentRead",
    "CommentUpdate",
    "ConsensusRead",
    "CurrentUserRead",
    "DecisionCreate",
    "DecisionDetail",
    "DecisionRead",
    "DecisionResolve",
    "DecisionVoteRequest",
    "DetailedAnalytics",
    "DiscussionCreate",
    "DiscussionDetail",
    "DiscussionHit",
    "DiscussionRead",
    "DiscussionUpdate",
    "ErrorResponse",
    "EvidenceCreate",
    "EvidenceRead",
    "InstitutionShare",
    "LoginRequest",
    "LoginResponse",
    "MarkAllReadResult",
    "Milestone",
    "NotificationList",
    "NotificationRead",
    "Page",
    "Pagination",
    "PlatformStats",
    "ProjectCreate",
    "ProjectDetail",
    "ProjectHit",
    "ProjectRead",
    "ProjectStats",
    "ProjectUpdate",
    "ReactionRequest",
    "ReactionResult",
    "RealtimeMessage",
    "ResearchTemplate",
    "SearchResponse",
    "SearchResults",
    "SimilarProject",
    "StatusResponse",
    "TeamMemberAdd",
    "TeamMemberRead",
    "TeamMemberUpdate",
    "TimelineEstimate",
    "UserHit",
    "UserPublic",
    "UserRead",
    "UserUpdate",
    "VoteRequest",
    "VoteResult",
]
