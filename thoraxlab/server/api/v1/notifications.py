"""
Notification API Endpoints.

The inbox of the current user, plus a Server-Sent Events stream of the
user's own realtime room.
"""

from fastapi import APIRouter, Depends, Query, Request
from sqlalchemy.ext.asyncio import AsyncSession
from sse_starlette.sse import EventSourceResponse

from thoraxlab.core.database import get_session
from thoraxlab.core.models.io import MarkAllReadResult, NotificationList, NotificationRead
from thoraxlab.server.services.deps import CurrentUser, HubDep
from thoraxlab.server.services.notifications import NotificationService
from thoraxlab.server.services.realtime import stream_room, user_room

router = APIRouter(tags=["notifications"])


@router.get(
    "",
    response_model=NotificationList,
    summary="List Notifications",
    description="Notifications of the current user, newest first. Expired notifications are excluded.",
)
async def list_notifications(
    user: CurrentUser,
    hub: HubDep,
    unread_only: bool = False,
    limit: int = Query(50, ge=1, le=100),
    session: AsyncSession = Depends(get_session),
) -> NotificationList:
    service = NotificationService(session, hub)
    items = await service.list_for_user(user.id, unread_only=unread_only, limit=limit)
    return NotificationList(
        items=[NotificationRead.model_validate(n) for n in items],
        unread_count=await service.unread_count(user.id),
    )


@router.post(
    "/read-all",
    response_model=MarkAllReadResult,
    summary="Mark All Read",
    description="Mark every notification of the current user as read.",
)
async def mark_all_read(user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)) -> MarkAllReadResult:
    updated = await NotificationService(session, hub).mark_all_read(user.id)
    return MarkAllReadResult(updated=updated)


@router.post(
    "/{notification_id}/read",
    response_model=NotificationRead,
    summary="Mark Read",
    responses={404: {"description": "Notification not found for this user"}},
)
async def mark_read(
    notification_id: str, user: CurrentUser, hub: HubDep, session: AsyncSession = Depends(get_session)
) -> NotificationRead:
    notification = await NotificationService(session, hub).mark_read(notification_id, user.id)
    return NotificationRead.model_validate(notification)


@router.get(
    "/stream",
    summary="Stream Notifications",
    description="Server-Sent Events stream of the current user's realtime room.",
    response_description="An event stream of realtime envelopes.",
)
async def stream_notifications(request: Request, user: CurrentUser, hub: HubDep):
    return EventSourceResponse(stream_room(hub, user_room(user.id), request, user_id=user.id))
