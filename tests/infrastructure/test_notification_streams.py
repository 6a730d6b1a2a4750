"""Tests for the websocket registry and the notification publisher."""

from __future__ import annotations

import asyncio
from datetime import datetime, timezone

import pytest

from kost_console.domain.entities import EVENT_PAYMENT_APPROVED, Notification
from kost_console.infrastructure.notifications import (
    NotificationConnectionManager,
    NotificationPublisher,
    serialize_notification,
)


class FakeSocket:
    def __init__(self, *, broken=False):
        self.broken = broken
        self.accepted = False
        self.sent = []
        self.close_codes = []

    async def accept(self):
        self.accepted = True

    async def send_json(self, message):
        if self.broken:
            raise RuntimeError("socket closed")
        self.sent.append(message)

    async def close(self, code=1000):
        self.close_codes.append(code)


def _notification(**overrides):
    values = {
        "id": 3,
        "user_id": 7,
        "event_type": EVENT_PAYMENT_APPROVED,
        "title": "Pembayaran disetujui",
        "message": "Pembayaran Anda untuk Mei 2024 telah disetujui.",
        "payload": {"payment_id": 1},
        "created_at": datetime(2024, 5, 2, 9, 0, tzinfo=timezone.utc),
    }
    values.update(overrides)
    return Notification(**values)


@pytest.mark.asyncio
async def test_manager_delivers_to_every_stream_of_user():
    manager = NotificationConnectionManager()
    first, second, other = FakeSocket(), FakeSocket(), FakeSocket()
    await manager.connect(7, first)
    await manager.connect(7, second)
    await manager.connect(8, other)

    delivered = await manager.send_to_user(7, {"type": "pong"})

    assert delivered == 2
    assert first.accepted and second.accepted
    assert first.sent == second.sent == [{"type": "pong"}]
    assert other.sent == []


@pytest.mark.asyncio
async def test_manager_drops_broken_streams():
    manager = NotificationConnectionManager()
    healthy, broken = FakeSocket(), FakeSocket(broken=True)
    await manager.connect(7, healthy)
    await manager.connect(7, broken)

    assert await manager.send_to_user(7, {"type": "pong"}) == 1
    assert manager.connection_count(7) == 1


@pytest.mark.asyncio
async def test_manager_disconnect_and_close_all():
    manager = NotificationConnectionManager()
    first, second = FakeSocket(), FakeSocket()
    await manager.connect(7, first)
    await manager.connect(8, second)

    manager.disconnect(7, first)
    manager.disconnect(7, first)
    assert manager.connection_count(7) == 0
    assert await manager.send_to_user(7, {"type": "pong"}) == 0

    await manager.close_all()
    assert second.close_codes == [1001]
    assert manager.connection_count(8) == 0


@pytest.mark.asyncio
async def test_publisher_schedules_frames_on_running_loop():
    manager = NotificationConnectionManager()
    socket = FakeSocket()
    await manager.connect(7, socket)
    publisher = NotificationPublisher(manager)

    publisher.dispatch(_notification())
    publisher.dispatch_unread_count(7, 4)
    await asyncio.sleep(0)
    await asyncio.sleep(0)

    assert socket.sent[0]["type"] == "notification"
    assert socket.sent[0]["data"]["type"] == EVENT_PAYMENT_APPROVED
    assert socket.sent[1] == {"type": "unread_count", "data": {"count": 4}}


def test_publisher_without_event_loop_does_not_raise():
    publisher = NotificationPublisher(NotificationConnectionManager())

    publisher.dispatch(_notification())
    publisher.dispatch_unread_count(7, 1)


def test_serialize_notification_wire_format():
    read_at = datetime(2024, 5, 3, 10, 0, tzinfo=timezone.utc)

    data = serialize_notification(_notification(read_at=read_at))

    assert data == {
        "id": 3,
        "type": EVENT_PAYMENT_APPROVED,
        "title": "Pembayaran disetujui",
        "message": "Pembayaran Anda untuk Mei 2024 telah disetujui.",
        "payload": {"payment_id": 1},
        "createdAt": "2024-05-02T09:00:00+00:00",
        "isRead": True,
        "readAt": "2024-05-03T10:00:00+00:00",
    }
