"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(populate_by_name=True)

    id: int
    type: str
    title: str
    message: str
    payload: dict[str, Any] = Field(default_factory=dict)
    created_at: datetime = Field(alias="createdAt")
    is_read: bool = Field(alias="isRead")
    read_at: datetime | None = Field(default=None, alias="readAt")


class UnreadCountRead(BaseModel):
    count: int


class MarkAllReadResponse(BaseModel):
    updated: int


__all__ = ["MarkAllReadResponse", "NotificationRead", "UnreadCountRead"]
