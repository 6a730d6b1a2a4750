"""Realtime notification client: transport, store and REST gateway."""

from .events import (
    CONNECT,
    CONNECT_ERROR,
    DISCONNECT,
    NEW_NOTIFICATION,
    UNREAD_COUNT,
    LocalIdFactory,
    MalformedEventError,
    kind_for,
    map_notification,
)
from .gateway import (
    GatewayAuthError,
    GatewayConnectionError,
    GatewayError,
    GatewayNotFoundError,
    GatewayRequestError,
    NotificationGateway,
)
from .models import Notification, NotificationKind
from .session import NotificationSession
from .store import LinkStatus, NotificationStore
from .toasts import TOAST_STYLES, LoggingToastSink, Toast, ToastSink, toast_for
from .transport import (
    ConnectionState,
    EventEmitter,
    NotificationTransport,
    ReconnectPolicy,
    TransportError,
    WebSocketTransport,
)

__all__ = [
    "CONNECT",
    "CONNECT_ERROR",
    "ConnectionState",
    "DISCONNECT",
    "EventEmitter",
    "GatewayAuthError",
    "GatewayConnectionError",
    "GatewayError",
    "GatewayNotFoundError",
    "GatewayRequestError",
    "LinkStatus",
    "LocalIdFactory",
    "LoggingToastSink",
    "MalformedEventError",
    "NEW_NOTIFICATION",
    "Notification",
    "NotificationGateway",
    "NotificationKind",
    "NotificationSession",
    "NotificationStore",
    "NotificationTransport",
    "ReconnectPolicy",
    "TOAST_STYLES",
    "Toast",
    "ToastSink",
    "TransportError",
    "UNREAD_COUNT",
    "WebSocketTransport",
    "kind_for",
    "map_notification",
    "toast_for",
]
