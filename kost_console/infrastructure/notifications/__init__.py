"""Realtime notification helpers for the infrastructure layer."""

from .manager import NotificationConnectionManager, notification_manager
from .publisher import (
    FRAME_CONNECTED,
    FRAME_NOTIFICATION,
    FRAME_PONG,
    FRAME_UNREAD_COUNT,
    NotificationPublisher,
    dispatch_notification,
    dispatch_unread_count,
    notification_publisher,
    serialize_notification,
    unread_count_frame,
)

__all__ = [
    "FRAME_CONNECTED",
    "FRAME_NOTIFICATION",
    "FRAME_PONG",
    "FRAME_UNREAD_COUNT",
    "NotificationConnectionManager",
    "notification_manager",
    "NotificationPublisher",
    "notification_publisher",
    "dispatch_notification",
    "dispatch_unread_count",
    "serialize_notification",
    "unread_count_frame",
]
