"""
User and authentication I/O models for API requests and responses.
"""

from __future__ import annotations

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from thoraxlab.core.models.domain import UserRole

EMAIL_PATTERN = r"^[^\s@]+@[^\s@]+\.[^\s@]+$"


class UserRead(BaseModel):
    """Schema for reading a user profile."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    email: str
    name: str
    role: UserRole
    institution: Optional[str] = None
    specialty: Optional[str] = None
    avatar_color: str
    created_at: datetime
    last_seen_at: datetime


class UserPublic(BaseModel):
    """Schema for another user's profile; the email address is not exposed."""

    model_config = ConfigDict(from_attributes=True)

    id: str
    name: str
    role: UserRole
    institution: Optional[str] = None
    specialty: Optional[str] = None
    avatar_color: str


class UserUpdate(BaseModel):
    """Schema for updating the current user's profile."""

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    institution: Optional[str] = Field(default=None, max_length=200)
    specialty: Optional[str] = Field(default=None, max_length=200)
    avatar_color: Optional[str] = Field(default=None, pattern=r"^#[0-9A-Fa-f]{6}$")


class LoginRequest(BaseModel):
    """Schema for logging in (and registering on first login)."""

    name: str = Field(description="Display name", max_length=200)
    email: str = Field(description="Email address", max_length=320)
    role: UserRole = Field(default=UserRole.clinician, description="Professional background")
    institution: Optional[str] = Field(default=None, max_length=200)
    specialty: Optional[str] = Field(default=None, max_length=200)

    @field_validator("name")
    @classmethod
    def _name_not_blank(cls, value: str) -> str:
        value = value.strip()
        if not value:
            raise ValueError("name must not be empty")
        return value

    @field_validator("email")
    @classmethod
    def _normalize_email(cls, value: str) -> str:
        return value.strip().lower()


class LoginResponse(BaseModel):
    token: str
    expires_at: datetime
    user: UserRead


class CurrentUserRead(BaseModel):
    """The current user with a few counters for the dashboard."""

    user: UserRead
    project_count: int
    unread_notifications: int
