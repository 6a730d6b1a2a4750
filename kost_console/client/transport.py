"""Persistent push connection delivering notification events."""

from __future__ import annotations

import asyncio
import inspect
import json
import logging
from abc import ABC, abstractmethod
from collections.abc import AsyncIterator, Awaitable, Callable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

import websockets
from websockets.exceptions import ConnectionClosed

from kost_console.config import ClientSettings

from .events import (
    CONNECT,
    CONNECT_ERROR,
    DISCONNECT,
    FRAME_CONNECTED,
    FRAME_NOTIFICATION,
    FRAME_PONG,
    FRAME_UNREAD_COUNT,
    NEW_NOTIFICATION,
    UNREAD_COUNT,
)

logger = logging.getLogger(__name__)

Handler = Callable[..., Any]


class TransportError(Exception):
    """Raised (and emitted as ``connect_error``) when the stream gives up."""


class ConnectionState(str, Enum):
    IDLE = "idle"
    CONNECTING = "connecting"
    OPEN = "open"
    CLOSED = "closed"
    FAILED = "failed"


@dataclass(frozen=True)
class ReconnectPolicy:
    """Exponential backoff bounded by ``max_delay`` and ``max_attempts``."""

    base_delay: float = 1.0
    max_delay: float = 30.0
    max_attempts: int = 5

    def delay_for(self, attempt: int) -> float:
        """Return the wait before reconnect number ``attempt`` (1-based)."""

        return min(self.base_delay * 2 ** (attempt - 1), self.max_delay)


class StreamConnection(Protocol):
    def __aiter__(self) -> AsyncIterator[str | bytes]: ...

    async def close(self) -> None: ...


Opener = Callable[[str], Awaitable[StreamConnection]]


class EventEmitter:
    """Local publish/subscribe registry keyed by event name.

    Handlers run in registration order and to completion; coroutine results
    are awaited before the next handler starts. A failing handler is logged
    and does not affect the others.
    """

    def __init__(self) -> None:
        self._handlers: dict[str, list[Handler]] = {}

    def on(self, event: str, handler: Handler) -> None:
        self._handlers.setdefault(event, []).append(handler)

    def off(self, event: str, handler: Handler | None = None) -> None:
        if event not in self._handlers:
            return
        if handler is None:
            del self._handlers[event]
            return
        # Bound methods compare equal but are never identical.
        remaining = [registered for registered in self._handlers[event] if registered != handler]
        if remaining:
            self._handlers[event] = remaining
        else:
            del self._handlers[event]

    def clear(self) -> None:
        self._handlers.clear()

    def listener_count(self, event: str) -> int:
        return len(self._handlers.get(event, ()))

    async def emit(self, event: str, *args: Any) -> None:
        for handler in list(self._handlers.get(event, ())):
            try:
                result = handler(*args)
                if inspect.isawaitable(result):
                    await result
            except Exception:
                logger.exception("Handler %r for %r failed", handler, event)


class NotificationTransport(ABC):
    """Transport-agnostic interface the notification store depends on."""

    def __init__(self) -> None:
        self._events = EventEmitter()

    def on(self, event: str, handler: Handler) -> None:
        self._events.on(event, handler)

    def off(self, event: str, handler: Handler | None = None) -> None:
        self._events.off(event, handler)

    @property
    @abstractmethod
    def state(self) -> ConnectionState: ...

    @abstractmethod
    def connect(self, token: str) -> None: ...

    @abstractmethod
    def disconnect(self) -> None: ...

    def is_connected(self) -> bool:
        return self.state is ConnectionState.OPEN

    async def aclose(self) -> None:
        self.disconnect()


class WebSocketTransport(NotificationTransport):
    """Websocket implementation with exponential-backoff reconnection.

    ``connect`` starts a background task on the running event loop which
    opens ``<url>?token=<token>``, translates server frames into the event
    vocabulary of :mod:`kost_console.client.events` and, when the socket
    closes without a manual :meth:`disconnect`, retries according to
    :class:`ReconnectPolicy`. ``opener`` and ``sleep`` are injectable so the
    state machine can be driven without a network.
    """

    def __init__(
        self,
        url: str,
        *,
        policy: ReconnectPolicy | None = None,
        opener: Opener | None = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
        open_timeout: float = 10.0,
    ) -> None:
        super().__init__()
        self.url = url
        self.policy = policy or ReconnectPolicy()
        self._opener = opener or self._open_websocket
        self._sleep = sleep
        self._open_timeout = open_timeout
        self._state = ConnectionState.IDLE
        self._token: str | None = None
        self._task: asyncio.Task[None] | None = None
        self._cancelled: set[asyncio.Task[None]] = set()
        self.reconnect_attempts = 0
        self.reconnect_delay = self.policy.base_delay
        self.is_manually_disconnected = False

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "WebSocketTransport":
        policy = ReconnectPolicy(
            base_delay=settings.reconnect_base_delay,
            max_delay=settings.reconnect_max_delay,
            max_attempts=settings.reconnect_max_attempts,
        )
        return cls(settings.stream_url, policy=policy, open_timeout=settings.request_timeout)

    @property
    def state(self) -> ConnectionState:
        return self._state

    def connect(self, token: str) -> None:
        """Open the stream for ``token``; a no-op while already live for it."""

        if (
            self._state in (ConnectionState.CONNECTING, ConnectionState.OPEN)
            and token == self._token
            and self._task is not None
            and not self._task.done()
        ):
            logger.debug("Notification stream already %s", self._state.value)
            return

        self._cancel_task()
        self._token = token
        self.is_manually_disconnected = False
        self.reconnect_attempts = 0
        self.reconnect_delay = self.policy.base_delay
        self._state = ConnectionState.CONNECTING
        loop = asyncio.get_running_loop()
        self._task = loop.create_task(self._run(token), name="notification-stream")

    def disconnect(self) -> None:
        """Stop the stream for good: no reconnects, no subscribers left."""

        self.is_manually_disconnected = True
        self._cancel_task()
        self._token = None
        self._state = ConnectionState.IDLE
        self._events.clear()
        logger.info("Notification stream disconnected")

    async def aclose(self) -> None:
        self.disconnect()
        if self._cancelled:
            await asyncio.gather(*self._cancelled, return_exceptions=True)

    def _cancel_task(self) -> None:
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
            self._cancelled.add(task)
            task.add_done_callback(self._cancelled.discard)

    def _set_state(self, state: ConnectionState) -> None:
        # A cancelled task may still be unwinding after a new one started.
        if asyncio.current_task() is self._task:
            self._state = state

    def _build_url(self, token: str) -> str:
        parts = urlsplit(self.url)
        query = dict(parse_qsl(parts.query))
        query["token"] = token
        return urlunsplit(parts._replace(query=urlencode(query)))

    async def _open_websocket(self, url: str) -> StreamConnection:
        return await websockets.connect(url, open_timeout=self._open_timeout)

    async def _run(self, token: str) -> None:
        url = self._build_url(token)
        while True:
            self._set_state(ConnectionState.CONNECTING)
            try:
                connection = await self._opener(url)
            except Exception as exc:
                logger.warning("Notification stream connection failed: %s", exc)
                self._set_state(ConnectionState.CLOSED)
            else:
                await self._serve(connection)

            if self.is_manually_disconnected or not await self._schedule_reconnect():
                return

    async def _serve(self, connection: StreamConnection) -> None:
        self._set_state(ConnectionState.OPEN)
        self.reconnect_attempts = 0
        self.reconnect_delay = self.policy.base_delay
        logger.info("Notification stream connected")

        reason = "Connection closed"
        try:
            await self._events.emit(CONNECT)
            async for frame in connection:
                await self._handle_frame(frame)
        except (ConnectionClosed, OSError) as exc:
            reason = str(exc) or reason
        except Exception as exc:
            logger.warning("Notification stream failed: %r", exc)
            reason = str(exc) or reason
        finally:
            self._set_state(ConnectionState.CLOSED)
            await connection.close()

        logger.info("Notification stream closed: %s", reason)
        await self._events.emit(DISCONNECT, reason)

    async def _schedule_reconnect(self) -> bool:
        if self.reconnect_attempts >= self.policy.max_attempts:
            self._set_state(ConnectionState.FAILED)
            logger.error(
                "Max reconnection attempts reached (%s); giving up",
                self.policy.max_attempts,
            )
            await self._events.emit(
                CONNECT_ERROR, TransportError("Max reconnection attempts reached")
            )
            return False

        self.reconnect_attempts += 1
        self.reconnect_delay = self.policy.delay_for(self.reconnect_attempts)
        logger.info(
            "Reconnecting in %.1fs (attempt %s/%s)",
            self.reconnect_delay,
            self.reconnect_attempts,
            self.policy.max_attempts,
        )
        await self._sleep(self.reconnect_delay)
        return not self.is_manually_disconnected

    async def _handle_frame(self, frame: str | bytes) -> None:
        try:
            message = json.loads(frame)
        except (TypeError, ValueError):
            logger.warning("Dropping malformed frame: %r", frame[:200])
            return
        if not isinstance(message, dict):
            logger.warning("Dropping frame that is not an object: %r", message)
            return

        frame_type = message.get("type")
        data = message.get("data")
        if frame_type == FRAME_NOTIFICATION:
            await self._events.emit(NEW_NOTIFICATION, data)
        elif frame_type == FRAME_UNREAD_COUNT:
            count = _coerce_count(data)
            if count is None:
                logger.warning("Dropping unread_count frame with payload %r", data)
                return
            await self._events.emit(UNREAD_COUNT, count)
        elif frame_type == FRAME_CONNECTED:
            logger.info("Notification stream acknowledged: %s", data)
        elif frame_type != FRAME_PONG:
            logger.debug("Ignoring frame of type %r", frame_type)


def _coerce_count(data: Any) -> int | None:
    if isinstance(data, dict):
        data = data.get("count")
    if isinstance(data, bool) or not isinstance(data, int) or data < 0:
        return None
    return data


__all__ = [
    "ConnectionState",
    "EventEmitter",
    "NotificationTransport",
    "ReconnectPolicy",
    "StreamConnection",
    "TransportError",
    "WebSocketTransport",
]
