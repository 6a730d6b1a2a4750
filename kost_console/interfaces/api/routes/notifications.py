"""Endpoints and websocket handler for realtime notifications."""

from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, WebSocket, WebSocketDisconnect, status
from sqlalchemy.orm import Session

from kost_console.domain.entities import Notification, User
from kost_console.infrastructure.database import SessionLocal, get_db
from kost_console.infrastructure.notifications import (
    FRAME_CONNECTED,
    FRAME_PONG,
    dispatch_unread_count,
    notification_manager,
    serialize_notification,
    unread_count_frame,
)
from kost_console.infrastructure.repositories import NotificationRepository
from kost_console.interfaces.api.dependencies import (
    get_current_active_user,
    resolve_current_user,
)
from kost_console.interfaces.api.schemas import (
    MarkAllReadResponse,
    NotificationRead,
    UnreadCountRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


def _notification_to_schema(notification: Notification) -> NotificationRead:
    return NotificationRead.model_validate(serialize_notification(notification))


@router.get("/", response_model=list[NotificationRead])
def list_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationRead]:
    """Return the notification history of the authenticated user, newest first."""

    notifications = NotificationRepository(db).list_for_user(current_user.id)
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/unread", response_model=list[NotificationRead])
def list_unread_notifications(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> list[NotificationRead]:
    notifications = NotificationRepository(db).list_unread_for_user(current_user.id)
    return [_notification_to_schema(notification) for notification in notifications]


@router.get("/unread/count", response_model=UnreadCountRead)
def get_unread_count(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> UnreadCountRead:
    return UnreadCountRead(count=NotificationRepository(db).count_unread_for_user(current_user.id))


@router.patch("/read-all", response_model=MarkAllReadResponse)
def mark_all_notifications_read(
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> MarkAllReadResponse:
    """Mark every unread notification of the user as read."""

    repository = NotificationRepository(db)
    updated = repository.mark_all_as_read(user_id=current_user.id)
    dispatch_unread_count(current_user.id, repository.count_unread_for_user(current_user.id))
    return MarkAllReadResponse(updated=updated)


@router.patch("/{notification_id}/read", response_model=NotificationRead)
def mark_notification_read(
    notification_id: int,
    db: Session = Depends(get_db),
    current_user: User = Depends(get_current_active_user),
) -> NotificationRead:
    """Mark a single notification as read."""

    repository = NotificationRepository(db)
    notification = repository.mark_as_read(notification_id, user_id=current_user.id)
    if notification is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Notifikasi tidak ditemukan",
        )
    dispatch_unread_count(current_user.id, repository.count_unread_for_user(current_user.id))
    return _notification_to_schema(notification)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Websocket endpoint that streams notifications to the authenticated user."""

    token = websocket.query_params.get("token")
    if not token:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return

    session = SessionLocal()
    try:
        user = resolve_current_user(token, session)
        if not user.is_active:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Pengguna tidak aktif")
        unread = NotificationRepository(session).count_unread_for_user(user.id)
    except HTTPException:
        await websocket.close(code=status.WS_1008_POLICY_VIOLATION)
        return
    finally:
        session.close()

    await notification_manager.connect(user.id, websocket)
    try:
        await websocket.send_json({"type": FRAME_CONNECTED, "data": {"userId": user.id}})
        await websocket.send_json(unread_count_frame(unread))
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except ValueError:
                logger.debug("Ignoring non JSON frame from user %s", user.id)
                continue

            if isinstance(message, dict) and message.get("type") == "ping":
                await websocket.send_json({"type": FRAME_PONG})
    except WebSocketDisconnect:
        notification_manager.disconnect(user.id, websocket)
    except Exception:
        notification_manager.disconnect(user.id, websocket)
        raise
