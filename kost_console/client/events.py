"""Event vocabulary and mapping of raw server records into notifications."""

from __future__ import annotations

import itertools
from collections.abc import Callable, Container, Hashable, Mapping
from datetime import datetime, timezone
from typing import Any, Final

from .models import Notification, NotificationKind

# Events emitted by a transport to its subscribers.
CONNECT: Final[str] = "connect"
DISCONNECT: Final[str] = "disconnect"
NEW_NOTIFICATION: Final[str] = "new_notification"
UNREAD_COUNT: Final[str] = "unread_count"
CONNECT_ERROR: Final[str] = "connect_error"

EVENT_NAMES: Final[frozenset[str]] = frozenset(
    {CONNECT, DISCONNECT, NEW_NOTIFICATION, UNREAD_COUNT, CONNECT_ERROR}
)

# Frame types sent by the server over the push channel.
FRAME_CONNECTED: Final[str] = "connected"
FRAME_NOTIFICATION: Final[str] = "notification"
FRAME_UNREAD_COUNT: Final[str] = "unread_count"
FRAME_PONG: Final[str] = "pong"

TYPE_CODE_KINDS: Final[Mapping[str, NotificationKind]] = {
    "PAYMENT_APPROVED": NotificationKind.APPROVAL,
    "PAYMENT_REJECTED": NotificationKind.REJECTION,
    "PAYMENT_REMINDER": NotificationKind.REMINDER,
}

_EPOCH_MILLIS_THRESHOLD: Final[int] = 100_000_000_000
_FALSE_STRINGS: Final[frozenset[str]] = frozenset({"", "0", "false", "no", "off"})


class MalformedEventError(ValueError):
    """Raised when a raw event cannot be interpreted as a notification at all."""


class LocalIdFactory:
    """Monotonic per-session source of ids for records sent without one."""

    def __init__(self, prefix: str = "local") -> None:
        self._prefix = prefix
        self._counter = itertools.count(1)

    def __call__(self, taken: Container[Any] = ()) -> str:
        while True:
            candidate = f"{self._prefix}-{next(self._counter)}"
            if candidate not in taken:
                return candidate


def kind_for(type_code: Any) -> NotificationKind:
    """Return the :class:`NotificationKind` for a server type code."""

    if not isinstance(type_code, str):
        return NotificationKind.GENERIC
    return TYPE_CODE_KINDS.get(type_code.strip().upper(), NotificationKind.GENERIC)


def parse_timestamp(value: Any) -> datetime | None:
    """Parse ISO strings, datetimes and epoch numbers; ``None`` when impossible."""

    if isinstance(value, datetime):
        return value if value.tzinfo else value.replace(tzinfo=timezone.utc)
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        seconds = value / 1000 if abs(value) >= _EPOCH_MILLIS_THRESHOLD else value
        try:
            return datetime.fromtimestamp(seconds, tz=timezone.utc)
        except (OverflowError, OSError, ValueError):
            return None
    if isinstance(value, str) and value.strip():
        text = value.strip()
        if text.endswith(("Z", "z")):
            text = f"{text[:-1]}+00:00"
        try:
            parsed = datetime.fromisoformat(text)
        except ValueError:
            return None
        return parsed if parsed.tzinfo else parsed.replace(tzinfo=timezone.utc)
    return None


def map_notification(
    raw: Any, *, id_factory: Callable[[], Hashable]
) -> Notification:
    """Build a :class:`Notification` from a history record or pushed event.

    Missing optional fields never fail the mapping: an unknown or absent type
    code yields :attr:`NotificationKind.GENERIC`, a missing id is taken from
    ``id_factory``, a missing read flag means unread and a missing or
    unparseable timestamp means "now". Only input that is not a mapping
    raises :class:`MalformedEventError`.
    """

    if not isinstance(raw, Mapping):
        raise MalformedEventError(f"Expected a mapping, got {type(raw).__name__}")

    type_code = _first(raw, "type", "event_type", "eventType")
    raw_id = raw.get("id")
    generated = raw_id is None or raw_id == ""
    created_at = parse_timestamp(_first(raw, "createdAt", "created_at", "timestamp"))

    return Notification(
        id=id_factory() if generated else raw_id,
        kind=kind_for(type_code),
        title=_text(raw.get("title")),
        body=_text(_first(raw, "message", "body")),
        created_at=created_at or datetime.now(timezone.utc),
        read=_read_flag(raw),
        type_code=type_code if isinstance(type_code, str) else None,
        local_id=generated,
    )


def _first(raw: Mapping[str, Any], *keys: str) -> Any:
    for key in keys:
        value = raw.get(key)
        if value is not None:
            return value
    return None


def _text(value: Any) -> str:
    if value is None:
        return ""
    return value if isinstance(value, str) else str(value)


def _read_flag(raw: Mapping[str, Any]) -> bool:
    flag = _first(raw, "isRead", "is_read", "read")
    if flag is None:
        return _first(raw, "readAt", "read_at") is not None
    if isinstance(flag, str):
        return flag.strip().lower() not in _FALSE_STRINGS
    return bool(flag)


__all__ = [
    "CONNECT",
    "CONNECT_ERROR",
    "DISCONNECT",
    "EVENT_NAMES",
    "FRAME_CONNECTED",
    "FRAME_NOTIFICATION",
    "FRAME_PONG",
    "FRAME_UNREAD_COUNT",
    "LocalIdFactory",
    "MalformedEventError",
    "NEW_NOTIFICATION",
    "TYPE_CODE_KINDS",
    "UNREAD_COUNT",
    "kind_for",
    "map_notification",
    "parse_timestamp",
]
