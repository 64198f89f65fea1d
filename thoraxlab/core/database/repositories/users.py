"""
User and session repository implementations.

This module provides data access operations for users and their bearer-token
login sessions.
"""

from __future__ import annotations

from datetime import datetime
from typing import Dict, Iterable, List, Optional, Tuple

from sqlalchemy import delete, func
from sqlalchemy.ext.asyncio import AsyncSession
from sqlmodel import select

from thoraxlab.core.models.domain import UserRole

from ..entities.users import User, UserSession
from .base import AsyncBaseRepository, QueryBuilder


class UserRepository(AsyncBaseRepository[User]):
    """Repository for user data access operations using SQLModel."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, User)

    async def get_by_email(self, email: str) -> Optional[User]:
        """Get a user by email address (case-insensitive).

        Args:
            email: Email address as typed by the user

        Returns:
            User instance or None
        """
        stmt = select(User).where(User.email == email.strip().lower())
        result = await self.session.execute(stmt)
        return result.scalars().first()

    async def list_by_ids(self, user_ids: Iterable[str]) -> List[User]:
        ids = list(set(user_ids))
        if not ids:
            return []
        result = await self.session.execute(select(User).where(User.id.in_(ids)))
        return list(result.scalars().all())

    async def search(self, term: str, limit: int) -> List[User]:
        """Find users whose name, institution or specialty contains ``term``."""
        stmt = (
            select(User)
            .where(QueryBuilder.ilike_any([User.name, User.institution, User.specialty], term))
            .order_by(User.name)
            .limit(limit)
        )
        result = await self.session.execute(stmt)
        return list(result.scalars().all())

    async def count_seen_since(self, since: datetime) -> int:
        stmt = select(func.count()).select_from(User).where(User.last_seen_at >= since)
        return int((await self.session.execute(stmt)).scalar_one())

    async def count_by_role(self) -> Dict[str, int]:
        stmt = select(User.role, func.count()).group_by(User.role)
        return {UserRole(role).value: int(count) for role, count in (await self.session.execute(stmt)).all()}

    async def top_institutions(self, limit: int) -> List[Tuple[str, int]]:
        """Institutions with the most users, as (institution, user count) pairs."""
        stmt = (
            select(User.institution, func.count().label("users"))
            .where(User.institution.is_not(None), User.institution != "")
            .group_by(User.institution)
            .order_by(func.count().desc(), User.institution)
            .limit(limit)
        )
        return [(institution, int(count)) for institution, count in (await self.session.execute(stmt)).all()]


class UserSessionRepository(AsyncBaseRepository[UserSession]):
    """Repository for bearer-token login sessions."""

    def __init__(self, session: AsyncSession) -> None:
        super().__init__(session, UserSession)

    async def count_active(self, now: datetime) -> int:
        stmt = select(func.count()).select_from(UserSession).where(UserSession.expires_at > now)
        return int((await self.session.execute(stmt)).scalar_one())

    async def purge_expired(self, now: datetime) -> int:
        """Delete every expired session.

        Args:
            now: Reference time

        Returns:
            Number of sessions removed
        """
        result = await self.session.execute(delete(UserSession).where(UserSession.expires_at <= now))
        await self.session.commit()
        return result.rowcount or 0
