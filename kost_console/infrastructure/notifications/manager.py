"""Registry of open notification streams, keyed by user id."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import WebSocket, status

logger = logging.getLogger(__name__)


class NotificationConnectionManager:
    """Track every websocket a user has open (one per browser tab)."""

    def __init__(self) -> None:
        self._streams: dict[int, list[WebSocket]] = {}

    async def connect(self, user_id: int, websocket: WebSocket) -> None:
        await websocket.accept()
        self._streams.setdefault(user_id, []).append(websocket)
        logger.info(
            "Notification stream opened for user %s (%s open)",
            user_id,
            self.connection_count(user_id),
        )

    def disconnect(self, user_id: int, websocket: WebSocket) -> None:
        streams = self._streams.get(user_id, [])
        if websocket in streams:
            streams.remove(websocket)
            logger.info("Notification stream closed for user %s", user_id)
        if not streams:
            self._streams.pop(user_id, None)

    def connection_count(self, user_id: int) -> int:
        return len(self._streams.get(user_id, ()))

    async def send_to_user(self, user_id: int, message: dict[str, Any]) -> int:
        """Send ``message`` to each stream of ``user_id``; return how many got it.

        Streams that fail to accept the frame are dropped from the registry.
        """

        delivered = 0
        for websocket in list(self._streams.get(user_id, ())):
            try:
                await websocket.send_json(message)
            except Exception as exc:  # pragma: no cover - socket already gone
                logger.warning("Dropping stale stream for user %s: %s", user_id, exc)
                self.disconnect(user_id, websocket)
            else:
                delivered += 1
        return delivered

    async def close_all(self) -> None:
        """Close every stream, used when the application shuts down."""

        for user_id, streams in list(self._streams.items()):
            for websocket in list(streams):
                try:
                    await websocket.close(code=status.WS_1001_GOING_AWAY)
                except Exception as exc:  # pragma: no cover - socket already gone
                    logger.debug("Stream for user %s already closed: %s", user_id, exc)
        self._streams.clear()


notification_manager = NotificationConnectionManager()


__all__ = ["NotificationConnectionManager", "notification_manager"]
