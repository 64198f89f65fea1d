"""
User and login session entity models.

Users are identified by their (lowercased) email address. A login creates a
``UserSession`` whose opaque token is presented as a bearer token on every
authenticated request until it expires.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from sqlmodel import Field

from ..base import Base, new_id, utc_now
from thoraxlab.core.models.domain import UserRole


class User(Base, table=True):
    """Registered ThoraxLab user.

    Table: users
    """

    __tablename__ = "users"
    __table_args__ = ({"extend_existing": True},)

    id: str = Field(default_factory=new_id, primary_key=True, max_length=32)
    email: str = Field(unique=True, index=True, max_length=320, description="Lowercased email address")
    name: str = Field(max_length=200, description="Display name")
    role: UserRole = Field(default=UserRole.clinician, description="Professional background")
    institution: Optional[str] = Field(default=None, max_length=200)
    specialty: Optional[str] = Field(default=None, max_length=200)
    avatar_color: str = Field(default="#0C7C59", max_length=16)

    created_at: datetime = Field(default_factory=utc_now)
    last_seen_at: datetime = Field(default_factory=utc_now)

    def __repr__(self) -> str:
        return f"User(id={self.id}, email={self.email}, role={self.role})"


class UserSession(Base, table=True):
    """Bearer-token login session.

    Table: user_sessions
    """

    __tablename__ = "user_sessions"
    __table_args__ = ({"extend_existing": True},)

    token: str = Field(primary_key=True, max_length=128)
    user_id: str = Field(foreign_key="users.id", index=True, ondelete="CASCADE")
    created_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime = Field(index=True)
    last_used_at: datetime = Field(default_factory=utc_now)

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at

    def __repr__(self) -> str:
        return f"UserSession(user_id={self.user_id}, expires_at={self.expires_at})"
