"""
Realtime API Endpoints.

Includes:
- WebSocket ``/ws?token=...``: authenticated connection joined to the user's
  room, with join/leave/typing/ping client messages
- Server-Sent Events stream of a project room for team members
"""

import json
from typing import Any, Dict, Optional

from fastapi import APIRouter, Depends, Query, Request, WebSocket, WebSocketDisconnect
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from thoraxlab.core.database import get_session
from thoraxlab.core.database.entities import User
from thoraxlab.core.errors import AuthenticationError
from thoraxlab.core.logging_config import get_logger
from thoraxlab.core.models.io import RealtimeMessage
from thoraxlab.server.services.access import get_membership, require_member
from thoraxlab.server.services.auth import AuthService
from thoraxlab.server.services.deps import CurrentUser, HubDep
from thoraxlab.server.services.realtime import (
    RealtimeHub,
    WebSocketSubscriber,
    get_hub,
    project_room,
    stream_room,
    user_room,
)

logger = get_logger(__name__)
router = APIRouter(tags=["realtime"])

WS_UNAUTHORIZED = 4401


async def send_error(subscriber: WebSocketSubscriber, code: str, message: str) -> None:
    await subscriber.send(RealtimeMessage(event="error", data={"code": code, "message": message}))


async def handle_client_message(
    raw: str,
    subscriber: WebSocketSubscriber,
    user: User,
    hub: RealtimeHub,
    session: AsyncSession,
) -> None:
    """
    Dispatch one client message.

    Supported types are ``join``, ``leave``, ``typing`` and ``ping``. Invalid
    JSON and unknown types are answered with an ``error`` event; the socket
    stays open.
    """
    try:
        message: Dict[str, Any] = json.loads(raw)
    except json.JSONDecodeError:
        await send_error(subscriber, "INVALID_JSON", "Message is not valid JSON")
        return
    if not isinstance(message, dict):
        await send_error(subscriber, "INVALID_MESSAGE", "Message must be a JSON object")
        return

    message_type = message.get("type")
    project_id: Optional[str] = message.get("project_id")

    if message_type == "ping":
        await subscriber.send(RealtimeMessage(event="pong"))
    elif message_type == "join":
        if not project_id or await get_membership(session, project_id, user.id) is None:
            await send_error(subscriber, "NOT_A_MEMBER", "You must be a team member to follow this project")
            return
        hub.join(project_room(project_id), subscriber)
        await subscriber.send(RealtimeMessage(event="room:joined", data={"project_id": project_id}))
    elif message_type == "leave":
        if project_id:
            hub.leave(project_room(project_id), subscriber)
        await subscriber.send(RealtimeMessage(event="room:left", data={"project_id": project_id}))
    elif message_type == "typing":
        room = project_room(project_id) if project_id else None
        if room is None or room not in hub.rooms_of(subscriber):
            await send_error(subscriber, "NOT_IN_ROOM", "Join the project before sending typing events")
            return
        await hub.broadcast(
            room,
            "user:typing",
            {
                "user_id": user.id,
                "name": user.name,
                "discussion_id": message.get("discussion_id"),
                "is_typing": bool(message.get("is_typing", True)),
            },
            exclude=subscriber,
        )
    else:
        await send_error(subscriber, "UNKNOWN_TYPE", f"Unknown message type: {message_type}")


@router.websocket("/ws")
async def realtime_socket(
    websocket: WebSocket,
    token: Optional[str] = Query(None),
    session: AsyncSession = Depends(get_session),
    hub: RealtimeHub = Depends(get_hub),
):
    """Authenticated realtime connection."""
    await websocket.accept()
    subscriber = WebSocketSubscriber(websocket)
    try:
        user = await AuthService(session).resolve(token)
    except AuthenticationError as e:
        logger.info(f"Rejected WebSocket connection: {e.code}")
        await send_error(subscriber, e.code, e.message)
        await websocket.close(code=WS_UNAUTHORIZED)
        return

    subscriber.user_id = user.id
    hub.join(user_room(user.id), subscriber)
    logger.info(f"WebSocket connected for user {user.id}")
    try:
        await subscriber.send(RealtimeMessage(event="connection:ready", data={"user_id": user.id}))
        while True:
            raw = await websocket.receive_text()
            await handle_client_message(raw, subscriber, user, hub, session)
    except WebSocketDisconnect:
        logger.info(f"WebSocket disconnected for user {user.id}")
    finally:
        hub.leave_all(subscriber)


@router.get(
    "/projects/{project_id}/events",
    summary="Stream Project Events",
    description="Server-Sent Events stream of a project room (team members only).",
    response_description="An event stream of realtime envelopes.",
    responses={403: {"description": "Not a team member"}},
)
async def stream_project_events(
    project_id: str,
    request: Request,
    user: CurrentUser,
    hub: HubDep,
    session: AsyncSession = Depends(get_session),
):
    await require_member(session, project_id, user.id)
    return EventSourceResponse(stream_room(hub, project_room(project_id), request, user_id=user.id))
