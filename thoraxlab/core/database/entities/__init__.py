"""
Database entity models.

This package contains all database entity models organized by business domain
and table relationships.

Modules:
- users: Users and bearer-token login sessions
- projects: Projects and their team membership
- discussions: Discussions, votes, evidence links, comments and reactions
- decisions: Decisions and decision votes
- notifications: Per-user notification inbox
- activity_log: Audit trail of user actions
"""

from .activity_log import ActivityLog
from .decisions import Decision, DecisionVote
from .discussions import (
    Comment,
    CommentReaction,
    Discussion,
    DiscussionVote,
    EvidenceLink,
)
from .notifications import Notification
from .projects import Project, ProjectTeamMember
from .users import User, UserSession

__all__ = [
    "ActivityLog",
    "Comment",
    "CommentReaction",
    "Decision",
    "DecisionVote",
    "Discussion",
    "DiscussionVote",
    "EvidenceLink",
    "Notification",
    "Project",
    "ProjectTeamMember",
    "User",
    "UserSession",
]
