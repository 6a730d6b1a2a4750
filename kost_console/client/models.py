"""Client-side projection of server notifications."""

from __future__ import annotations

from collections.abc import Hashable
from dataclasses import dataclass
from datetime import datetime
from enum import Enum


class NotificationKind(str, Enum):
    """Closed taxonomy driving toast styling and badge icons."""

    APPROVAL = "approval"
    REJECTION = "rejection"
    REMINDER = "reminder"
    GENERIC = "generic"


@dataclass(frozen=True)
class Notification:
    """A notification as shown in the bell dropdown.

    Entries are immutable; the store swaps in a copy when ``read`` changes.
    ``local_id`` marks entries whose ``id`` was generated on the client
    because the server record carried none.
    """

    id: Hashable
    kind: NotificationKind
    title: str
    body: str
    created_at: datetime
    read: bool = False
    type_code: str | None = None
    local_id: bool = False


__all__ = ["Notification", "NotificationKind"]
