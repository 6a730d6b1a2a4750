"""Utility helpers to push notifications to websocket subscribers."""

from __future__ import annotations

import asyncio
import logging
from typing import Any

from anyio import from_thread

from kost_console.domain.entities import Notification

from .manager import NotificationConnectionManager, notification_manager

logger = logging.getLogger(__name__)

FRAME_CONNECTED = "connected"
FRAME_NOTIFICATION = "notification"
FRAME_UNREAD_COUNT = "unread_count"
FRAME_PONG = "pong"


class NotificationPublisher:
    """Serialize notification events and schedule their delivery."""

    def __init__(self, manager: NotificationConnectionManager) -> None:
        self._manager = manager

    def dispatch(self, notification: Notification) -> None:
        """Schedule ``notification`` to be delivered to its user."""

        message = {"type": FRAME_NOTIFICATION, "data": serialize_notification(notification)}
        self._schedule_send(notification.user_id, message)

    def dispatch_unread_count(self, user_id: int, count: int) -> None:
        """Push the authoritative unread counter for ``user_id``."""

        self._schedule_send(user_id, unread_count_frame(count))

    def _schedule_send(self, user_id: int, message: dict[str, Any]) -> None:
        if not user_id:
            return
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            try:
                from_thread.run(self._manager.send_to_user, user_id, message)
            except RuntimeError:
                # Called outside the server's event loop (scripts, shell).
                logger.debug("No realtime loop available; %s not pushed", message["type"])
        else:
            loop.create_task(self._manager.send_to_user(user_id, message))


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the wire representation shared by the REST and push channels."""

    return {
        "id": notification.id,
        "type": notification.event_type,
        "title": notification.title,
        "message": notification.message,
        "payload": notification.payload or {},
        "createdAt": notification.created_at.isoformat()
        if notification.created_at
        else None,
        "isRead": notification.is_read,
        "readAt": notification.read_at.isoformat() if notification.read_at else None,
    }


def unread_count_frame(count: int) -> dict[str, Any]:
    return {"type": FRAME_UNREAD_COUNT, "data": {"count": count}}


notification_publisher = NotificationPublisher(notification_manager)


def dispatch_notification(notification: Notification) -> None:
    """Public helper that delegates to the shared publisher instance."""

    notification_publisher.dispatch(notification)


def dispatch_unread_count(user_id: int, count: int) -> None:
    """Public helper to push an ``unread_count`` frame to ``user_id``."""

    notification_publisher.dispatch_unread_count(user_id, count)


__all__ = [
    "FRAME_CONNECTED",
    "FRAME_NOTIFICATION",
    "FRAME_PONG",
    "FRAME_UNREAD_COUNT",
    "NotificationPublisher",
    "dispatch_notification",
    "dispatch_unread_count",
    "notification_publisher",
    "serialize_notification",
    "unread_count_frame",
]
