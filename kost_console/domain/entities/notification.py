"""Domain entity representing a user notification."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

EVENT_PAYMENT_SUBMITTED = "PAYMENT_SUBMITTED"
EVENT_PAYMENT_APPROVED = "PAYMENT_APPROVED"
EVENT_PAYMENT_REJECTED = "PAYMENT_REJECTED"
EVENT_PAYMENT_REMINDER = "PAYMENT_REMINDER"


@dataclass
class Notification:
    """Information message delivered to a specific user."""

    id: int | None
    user_id: int
    event_type: str
    title: str
    message: str
    payload: dict[str, Any] = field(default_factory=dict)
    created_at: datetime | None = None
    read_at: datetime | None = None

    @property
    def is_read(self) -> bool:
        return self.read_at is not None


__all__ = [
    "EVENT_PAYMENT_APPROVED",
    "EVENT_PAYMENT_REJECTED",
    "EVENT_PAYMENT_REMINDER",
    "EVENT_PAYMENT_SUBMITTED",
    "Notification",
]
