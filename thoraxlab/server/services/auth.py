"""
Bearer-token session service.

Users log in with a name and email address; the first login registers them.
Each login issues an opaque session token that is valid for
``auth.session_ttl_days`` and is looked up on every authenticated request.
"""

from __future__ import annotations

import re
import secrets
from datetime import timedelta
from typing import Optional, Tuple

from sqlalchemy.ext.asyncio import AsyncSession

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import User, UserSession
from thoraxlab.core.database.repositories.users import UserRepository, UserSessionRepository
from thoraxlab.core.errors import AuthenticationError, ValidationError
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.domain import NotificationType
from thoraxlab.core.models.io.users import EMAIL_PATTERN, LoginRequest
from thoraxlab.server.core.config import settings
from thoraxlab.server.services.activity import ActivityService
from thoraxlab.server.services.notifications import NotificationService

logger = get_logger(__name__)

_EMAIL_RE = re.compile(EMAIL_PATTERN)

AVATAR_COLORS = ("#0C7C59", "#1A365D", "#2B6CB0", "#C53030", "#B7791F", "#6B46C1", "#2F855A", "#D53F8C")


def avatar_color_for(email: str) -> str:
    """Pick a stable avatar color from the email address."""
    return AVATAR_COLORS[sum(ord(ch) for ch in email) % len(AVATAR_COLORS)]


class AuthService:
    """Service for logging in, logging out and resolving session tokens."""

    def __init__(self, session: AsyncSession):
        self.session = session
        self.users = UserRepository(session)
        self.sessions = UserSessionRepository(session)

    async def login(self, request: LoginRequest) -> Tuple[UserSession, User]:
        """
        Log a user in, registering them on first login.

        Profile fields are refreshed from the request on every login.

        Args:
            request: Login payload

        Returns:
            Tuple of (new session, user)

        Raises:
            ValidationError: If the email address is malformed
        """
        if not _EMAIL_RE.match(request.email):
            raise ValidationError(f"Invalid email address: {request.email}")

        user = await self.users.get_by_email(request.email)
        created = user is None
        if user is None:
            user = User(
                email=request.email,
                name=request.name,
                role=request.role,
                institution=request.institution,
                specialty=request.specialty,
                avatar_color=avatar_color_for(request.email),
            )
        else:
            user.name = request.name
            user.role = request.role
            if request.institution is not None:
                user.institution = request.institution
            if request.specialty is not None:
                user.specialty = request.specialty
        user.last_seen_at = utc_now()
        user = await self.users.update(user)

        now = utc_now()
        user_session = await self.sessions.create(
            UserSession(
                token=secrets.token_urlsafe(32),
                user_id=user.id,
                created_at=now,
                expires_at=now + timedelta(days=settings.auth.session_ttl_days),
                last_used_at=now,
            )
        )

        if created:
            logger.info(f"Registered new user {user.id} ({user.role.value})")
            await NotificationService(self.session).notify(
                user.id,
                NotificationType.welcome,
                "Welcome to ThoraxLab",
                f"Hi {user.name}, start by creating a project or joining a team.",
            )
            await ActivityService(self.session).log(user.id, "user_registered", entity_type="user", entity_id=user.id)
        else:
            logger.info(f"User {user.id} logged in")
        return user_session, user

    async def logout(self, token: str) -> bool:
        removed = await self.sessions.delete(token)
        if removed:
            logger.info("Session closed")
        return removed

    async def resolve(self, token: Optional[str]) -> User:
        """
        Map a bearer token to its user.

        Successful lookups refresh the session's ``last_used_at`` and the
        user's ``last_seen_at``. Expired sessions are deleted.

        Args:
            token: Bearer token, or None when the request carried none

        Returns:
            The authenticated user

        Raises:
            AuthenticationError: With code NO_SESSION, INVALID_SESSION,
                SESSION_EXPIRED or USER_NOT_FOUND
        """
        if not token:
            raise AuthenticationError("Authentication required", code="NO_SESSION")

        user_session = await self.sessions.get_by_id(token)
        if user_session is None:
            raise AuthenticationError("Invalid session", code="INVALID_SESSION")

        now = utc_now()
        if user_session.is_expired(now):
            await self.sessions.delete(token)
            raise AuthenticationError("Session expired", code="SESSION_EXPIRED")

        user = await self.users.get_by_id(user_session.user_id)
        if user is None:
            await self.sessions.delete(token)
            raise AuthenticationError("User not found", code="USER_NOT_FOUND")

        user_session.last_used_at = now
        user.last_seen_at = now
        self.session.add(user_session)
        self.session.add(user)
        await self.session.commit()
        await self.session.refresh(user)
        return user
