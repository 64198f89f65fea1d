"""Unit tests for the notification inbox."""

from datetime import timedelta

import pytest

from thoraxlab.core.database import utc_now
from thoraxlab.core.database.entities import Notification
from thoraxlab.core.errors import NotFoundError
from thoraxlab.core.models.domain import NotificationPriority, NotificationType
from thoraxlab.server.core.config import settings
from thoraxlab.server.services.notifications import NotificationService
from thoraxlab.server.services.realtime import QueueSubscriber, user_room
from test.unit_test.helpers import make_user

pytestmark = pytest.mark.asyncio


class TestNotify:
    async def test_persists_with_expiry(self, session, hub):
        user = await make_user(session)

        notification = await NotificationService(session, hub).notify(
            user.id,
            NotificationType.team_added,
            "Added to COPD study",
            "You were added as contributor",
            data={"project_id": "p1"},
            priority=NotificationPriority.high,
        )

        assert notification.is_read is False
        assert notification.data == {"project_id": "p1"}
        assert notification.expires_at - notification.created_at == timedelta(
            days=settings.collaboration.notification_ttl_days
        )

    async def test_pushes_to_user_room(self, session, hub):
        user = await make_user(session)
        subscriber = QueueSubscriber(user.id)
        hub.join(user_room(user.id), subscriber)

        notification = await NotificationService(session, hub).notify(user.id, NotificationType.mention, "Hi", "Body")

        message = subscriber.queue.get_nowait()
        assert message.event == "notification:new"
        assert message.data["id"] == notification.id

    async def test_title_and_message_are_clipped(self, session, hub):
        user = await make_user(session)

        notification = await NotificationService(session, hub).notify(
            user.id, NotificationType.mention, "t" * 300, "m" * 2000
        )

        assert len(notification.title) == 200
        assert len(notification.message) == 1000

    async def test_cap_drops_oldest(self, session, hub, monkeypatch):
        monkeypatch.setattr(settings, "max_notifications_per_user", 3)
        user = await make_user(session)
        service = NotificationService(session, hub)

        for i in range(5):
            await service.notify(user.id, NotificationType.mention, f"n{i}", "body")

        assert len(await service.list_for_user(user.id)) == 3

    async def test_notify_many_skips_actor_and_duplicates(self, session, hub):
        actor = await make_user(session, "Dr. Alex Chen")
        other = await make_user(session, "Emma Rodriguez")

        sent = await NotificationService(session, hub).notify_many(
            [actor.id, other.id, other.id], NotificationType.discussion_new, "New", "Body", exclude=actor.id
        )

        assert [n.user_id for n in sent] == [other.id]


class TestInbox:
    async def test_expired_notifications_are_hidden(self, session, hub):
        user = await make_user(session)
        now = utc_now()
        session.add(
            Notification(
                user_id=user.id,
                notification_type=NotificationType.mention,
                title="Old",
                message="Expired",
                created_at=now - timedelta(days=40),
                expires_at=now - timedelta(days=10),
            )
        )
        await session.commit()
        service = NotificationService(session, hub)

        assert await service.list_for_user(user.id) == []
        assert await service.unread_count(user.id) == 0

    async def test_unread_only_and_mark_read(self, session, hub):
        user = await make_user(session)
        service = NotificationService(session, hub)
        first = await service.notify(user.id, NotificationType.mention, "One", "Body")
        await service.notify(user.id, NotificationType.mention, "Two", "Body")

        await service.mark_read(first.id, user.id)

        unread = await service.list_for_user(user.id, unread_only=True)
        assert [n.title for n in unread] == ["Two"]
        assert await service.unread_count(user.id) == 1

    async def test_mark_read_of_someone_else(self, session, hub):
        owner = await make_user(session, "Dr. Alex Chen")
        intruder = await make_user(session, "Emma Rodriguez")
        notification = await NotificationService(session, hub).notify(owner.id, NotificationType.mention, "Hi", "Body")

        with pytest.raises(NotFoundError):
            await NotificationService(session, hub).mark_read(notification.id, intruder.id)

    async def test_mark_all_read(self, session, hub):
        user = await make_user(session)
        service = NotificationService(session, hub)
        for title in ("One", "Two"):
            await service.notify(user.id, NotificationType.mention, title, "Body")

        assert await service.mark_all_read(user.id) == 2
        assert await service.unread_count(user.id) == 0
