"""Unit tests for NotificationRepository."""

from datetime import timedelta

import pytest

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Notification
from thoraxlab.core.database.repositories.notifications import NotificationRepository
from thoraxlab.core.models.domain import NotificationType
from test.unit_test.helpers import make_user

pytestmark = pytest.mark.asyncio


async def _add(session, user_id, title, minutes_ago=0, is_read=False):
    now = utc_now()
    notification = Notification(
        user_id=user_id,
        notification_type=NotificationType.mention,
        title=title,
        message="body",
        is_read=is_read,
        created_at=now - timedelta(minutes=minutes_ago),
        expires_at=now + timedelta(days=30),
    )
    session.add(notification)
    await session.commit()
    return notification


class TestNotificationRepository:
    async def test_enforce_cap_keeps_newest(self, session):
        user = await make_user(session)
        for minutes_ago, title in [(30, "oldest"), (20, "old"), (10, "new"), (0, "newest")]:
            await _add(session, user.id, title, minutes_ago)
        repo = NotificationRepository(session)

        removed = await repo.enforce_cap(user.id, 2)

        assert removed == 2
        kept = await repo.list_for_user(user.id, utc_now(), False, 10)
        assert [n.title for n in kept] == ["newest", "new"]

    async def test_enforce_cap_is_per_user(self, session):
        alex = await make_user(session, "Dr. Alex Chen")
        emma = await make_user(session, "Emma Rodriguez")
        await _add(session, alex.id, "a1")
        await _add(session, emma.id, "e1")
        await _add(session, emma.id, "e2", minutes_ago=5)

        assert await NotificationRepository(session).enforce_cap(alex.id, 1) == 0

    async def test_mark_all_read_counts_only_unread(self, session):
        user = await make_user(session)
        await _add(session, user.id, "read", is_read=True)
        await _add(session, user.id, "unread")
        repo = NotificationRepository(session)

        assert await repo.mark_all_read(user.id) == 1
        assert await repo.count_unread(user.id, utc_now()) == 0

    async def test_get_for_user_checks_owner(self, session):
        alex = await make_user(session, "Dr. Alex Chen")
        emma = await make_user(session, "Emma Rodriguez")
        notification = await _add(session, alex.id, "mine")
        repo = NotificationRepository(session)

        assert (await repo.get_for_user(notification.id, alex.id)).id == notification.id
        assert await repo.get_for_user(notification.id, emma.id) is None
