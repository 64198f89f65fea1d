"""
Database repository layer using SQLModel.

This package contains all repository classes organized by business domain
and table relationships. Each module provides type-safe data access operations
for its corresponding SQLModel entity models.

Modules:
- base: AsyncBaseRepository and QueryBuilder utilities
- users: Users and login sessions
- projects: Projects and team membership
- discussions: Discussions, votes and evidence links
- comments: Comments and reactions
- decisions: Decisions and decision votes
- notifications: Per-user notification inboxes
- activity_log: Audit trail
"""

from . import (
    activity_log,
    comments,
    decisions,
    discussions,
    notifications,
    projects,
    users,
)

__all__ = [
    "activity_log",
    "comments",
    "decisions",
    "discussions",
    "notifications",
    "projects",
    "users",
]
