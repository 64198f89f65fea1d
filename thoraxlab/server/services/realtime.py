"""
Realtime broadcast hub.

Keeps an in-memory map of room name to subscribers and fans events out to
them. Rooms are ``project:<id>`` for everyone watching a project and
``user:<id>`` for the connections of a single user.

Delivery is best effort: a broadcast walks a snapshot of the room, and a
subscriber whose send fails is logged and dropped. There is no retry,
ordering or backpressure guarantee across subscribers.
"""

from __future__ import annotations

import asyncio
from typing import Any, AsyncGenerator, Dict, Optional, Protocol, Set

from starlette.websockets import WebSocket

from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.io import RealtimeMessage

logger = get_logger(__name__)

KEEP_ALIVE_SECONDS = 15.0
ROOM_EVICTED = "room:evicted"


def project_room(project_id: str) -> str:
    return f"project:{project_id}"


def user_room(user_id: str) -> str:
    return f"user:{user_id}"


class Subscriber(Protocol):
    """Anything that can receive a serialized realtime message."""

    user_id: Optional[str]

    async def send(self, message: RealtimeMessage) -> None: ...


class WebSocketSubscriber:
    """Subscriber backed by an accepted WebSocket connection."""

    def __init__(self, websocket: WebSocket, user_id: Optional[str] = None) -> None:
        self.websocket = websocket
        self.user_id = user_id

    async def send(self, message: RealtimeMessage) -> None:
        await self.websocket.send_text(message.model_dump_json())

    def __repr__(self) -> str:
        return f"WebSocketSubscriber(user_id={self.user_id})"


class QueueSubscriber:
    """Subscriber that buffers messages in an asyncio queue, used by SSE streams."""

    def __init__(self, user_id: Optional[str] = None, maxsize: int = 0) -> None:
        self.user_id = user_id
        self.queue: asyncio.Queue[RealtimeMessage] = asyncio.Queue(maxsize=maxsize)

    async def send(self, message: RealtimeMessage) -> None:
        self.queue.put_nowait(message)

    def __repr__(self) -> str:
        return f"QueueSubscriber(user_id={self.user_id})"


class RealtimeHub:
    """In-memory room registry with best-effort fan-out."""

    def __init__(self) -> None:
        self._rooms: Dict[str, Set[Subscriber]] = {}

    def join(self, room: str, subscriber: Subscriber) -> None:
        self._rooms.setdefault(room, set()).add(subscriber)
        logger.debug(f"{subscriber!r} joined {room}")

    def leave(self, room: str, subscriber: Subscriber) -> None:
        members = self._rooms.get(room)
        if not members:
            return
        members.discard(subscriber)
        if not members:
            del self._rooms[room]
        logger.debug(f"{subscriber!r} left {room}")

    def leave_all(self, subscriber: Subscriber) -> None:
        """Remove a subscriber from every room it joined."""
        for room in list(self._rooms):
            self.leave(room, subscriber)

    def members(self, room: str) -> Set[Subscriber]:
        return set(self._rooms.get(room, set()))

    def rooms_of(self, subscriber: Subscriber) -> Set[str]:
        return {room for room, members in self._rooms.items() if subscriber in members}

    async def evict_user(self, room: str, user_id: str) -> int:
        """Drop every subscriber of ``room`` owned by ``user_id``.

        Each evicted subscriber gets a final ``room:evicted`` event so that
        clients (and SSE streams, which stop on it) know the room is gone.
        The send is best effort since the subscriber is leaving anyway.
        """
        evicted = [subscriber for subscriber in self.members(room) if subscriber.user_id == user_id]
        for subscriber in evicted:
            self.leave(room, subscriber)
            try:
                await subscriber.send(RealtimeMessage(event=ROOM_EVICTED, data={"room": room}))
            except Exception as e:
                logger.debug(f"Could not notify {subscriber!r} of eviction from {room}: {e}")
        if evicted:
            logger.info(f"Evicted {len(evicted)} subscriber(s) of user {user_id} from {room}")
        return len(evicted)

    @property
    def connection_count(self) -> int:
        """Number of distinct subscribers across all rooms."""
        unique: Set[Subscriber] = set()
        for members in self._rooms.values():
            unique.update(members)
        return len(unique)

    async def broadcast(
        self,
        room: str,
        event: str,
        data: Any = None,
        exclude: Optional[Subscriber] = None,
    ) -> int:
        """Send an event to every subscriber of ``room``.

        Args:
            room: Room name, e.g. ``project:<id>``
            event: Event name
            data: JSON-serializable payload
            exclude: Subscriber that should not receive the event (usually the sender)

        Returns:
            Number of subscribers the event was delivered to
        """
        message = RealtimeMessage(event=event, data=data)
        delivered = 0
        for subscriber in list(self._rooms.get(room, ())):
            if subscriber is exclude:
                continue
            try:
                await subscriber.send(message)
                delivered += 1
            except Exception as e:
                logger.warning(f"Dropping subscriber {subscriber!r} from {room} after failed send: {e}")
                self.leave_all(subscriber)
        return delivered

    async def send_to_user(self, user_id: str, event: str, data: Any = None) -> int:
        return await self.broadcast(user_room(user_id), event, data)

    async def send_to_project(self, project_id: str, event: str, data: Any = None) -> int:
        return await self.broadcast(project_room(project_id), event, data)


async def stream_room(hub: RealtimeHub, room: str, request, user_id: Optional[str] = None) -> AsyncGenerator[Dict[str, str], None]:
    """Yield SSE events for ``room`` until the client disconnects or is evicted.

    Joins a queue-backed subscriber to the room and forwards every message as
    an sse-starlette event dict. A keep-alive comment is emitted when the room
    is idle.

    Args:
        hub: Realtime hub
        room: Room to follow
        request: Incoming Starlette request, polled for disconnects
        user_id: Owner of the stream, for logging
    """
    subscriber = QueueSubscriber(user_id=user_id)
    hub.join(room, subscriber)
    logger.info(f"SSE stream opened for {room} (user={user_id})")
    try:
        yield {"event": "connection:ready", "data": RealtimeMessage(event="connection:ready", data={"room": room}).model_dump_json()}
        while True:
            if await request.is_disconnected():
                logger.info(f"Client disconnected from {room} stream")
                break
            try:
                message = await asyncio.wait_for(subscriber.queue.get(), timeout=KEEP_ALIVE_SECONDS)
            except asyncio.TimeoutError:
                yield {"comment": "keep-alive"}
                continue
            yield {"event": message.event, "data": message.model_dump_json()}
            if message.event == ROOM_EVICTED:
                logger.info(f"Closing {room} stream for user {user_id}: removed from the room")
                break
    finally:
        hub.leave_all(subscriber)


_hub: Optional[RealtimeHub] = None


def get_hub() -> RealtimeHub:
    global _hub
    if _hub is None:
        _hub = RealtimeHub()
    return _hub
