"""Tests for the websocket transport state machine."""

from __future__ import annotations

import asyncio
import json

import pytest

from kost_console.client import (
    CONNECT,
    CONNECT_ERROR,
    DISCONNECT,
    NEW_NOTIFICATION,
    UNREAD_COUNT,
    ConnectionState,
    EventEmitter,
    ReconnectPolicy,
    TransportError,
    WebSocketTransport,
)

URL = "ws://kost.test/notifications/ws"


class FakeConnection:
    """Yields ``frames`` then closes, raises ``error`` or stays open until released."""

    def __init__(self, *frames, hold=False, error=None):
        self.frames = list(frames)
        self.hold = hold
        self.error = error
        self.closed = False
        self._released = asyncio.Event()

    def __aiter__(self):
        return self._iterate()

    async def _iterate(self):
        for frame in self.frames:
            yield frame
        if self.error is not None:
            raise self.error
        if self.hold:
            await self._released.wait()

    def drop(self):
        self._released.set()

    async def close(self):
        self.closed = True


class FakeOpener:
    """Returns queued connections; raises ``OSError`` once the queue is empty."""

    def __init__(self, *outcomes):
        self.outcomes = list(outcomes)
        self.urls = []
        self.states = []
        self.transport = None

    async def __call__(self, url):
        self.urls.append(url)
        if self.transport is not None:
            self.states.append(self.transport.state)
        outcome = self.outcomes.pop(0) if self.outcomes else OSError("connection refused")
        if isinstance(outcome, Exception):
            raise outcome
        return outcome


class RecordingSleep:
    def __init__(self, transport=None):
        self.delays = []
        self.snapshots = []
        self.transport = transport

    async def __call__(self, delay):
        self.delays.append(delay)
        if self.transport is not None:
            self.snapshots.append((self.transport.state, self.transport.reconnect_attempts))
        await asyncio.sleep(0)


class BlockingSleep:
    def __init__(self):
        self.delays = []
        self.started = asyncio.Event()

    async def __call__(self, delay):
        self.delays.append(delay)
        self.started.set()
        await asyncio.Event().wait()


async def wait_until(predicate, attempts=500):
    for _ in range(attempts):
        if predicate():
            return
        await asyncio.sleep(0)
    raise AssertionError("condition not reached")


def _frame(frame_type, data=None):
    return json.dumps({"type": frame_type, "data": data})


def _build(opener, sleep=None, policy=None):
    transport = WebSocketTransport(
        URL, opener=opener, sleep=sleep or RecordingSleep(), policy=policy
    )
    opener.transport = transport
    if isinstance(sleep, RecordingSleep):
        sleep.transport = transport
    return transport


@pytest.mark.parametrize(
    ("attempt", "expected"),
    [(1, 1.0), (2, 2.0), (3, 4.0), (5, 16.0), (6, 30.0), (10, 30.0)],
)
def test_reconnect_policy_delay_for(attempt, expected):
    assert ReconnectPolicy().delay_for(attempt) == expected


@pytest.mark.asyncio
async def test_event_emitter_runs_every_handler_in_order():
    emitter = EventEmitter()
    received = []

    async def async_handler(value):
        await asyncio.sleep(0)
        received.append(("async", value))

    def failing_handler(value):
        raise RuntimeError("boom")

    emitter.on("evt", lambda value: received.append(("first", value)))
    emitter.on("evt", failing_handler)
    emitter.on("evt", async_handler)

    await emitter.emit("evt", 1)

    assert received == [("first", 1), ("async", 1)]
    assert emitter.listener_count("evt") == 3


@pytest.mark.asyncio
async def test_event_emitter_off_with_and_without_handler():
    emitter = EventEmitter()
    received = []

    class Listener:
        def handle(self, value):
            received.append(value)

    listener = Listener()
    emitter.on("evt", listener.handle)
    emitter.on("evt", received.append)
    emitter.off("evt", listener.handle)
    await emitter.emit("evt", "a")

    emitter.off("evt")
    await emitter.emit("evt", "b")
    emitter.off("missing")

    assert received == ["a"]
    assert emitter.listener_count("evt") == 0


@pytest.mark.asyncio
async def test_connect_opens_stream_with_token_and_emits_connect():
    connection = FakeConnection(hold=True)
    opener = FakeOpener(connection)
    transport = _build(opener)
    connected = asyncio.Event()
    transport.on(CONNECT, connected.set)

    assert transport.state is ConnectionState.IDLE
    transport.connect("abc123")
    assert transport.state is ConnectionState.CONNECTING

    await asyncio.wait_for(connected.wait(), timeout=1)

    assert transport.is_connected()
    assert transport.state is ConnectionState.OPEN
    assert opener.urls == [f"{URL}?token=abc123"]

    await transport.aclose()
    assert connection.closed


@pytest.mark.asyncio
async def test_token_is_added_to_existing_query():
    connection = FakeConnection(hold=True)
    opener = FakeOpener(connection)
    transport = WebSocketTransport(f"{URL}?v=1", opener=opener, sleep=RecordingSleep())

    transport.connect("t 1")
    await wait_until(lambda: transport.is_connected())

    assert opener.urls == [f"{URL}?v=1&token=t+1"]
    await transport.aclose()


@pytest.mark.asyncio
async def test_connect_is_idempotent_for_same_token():
    opener = FakeOpener(FakeConnection(hold=True), FakeConnection(hold=True))
    transport = _build(opener)

    transport.connect("abc")
    transport.connect("abc")
    await wait_until(lambda: transport.is_connected())
    transport.connect("abc")
    await asyncio.sleep(0)

    assert len(opener.urls) == 1
    await transport.aclose()


@pytest.mark.asyncio
async def test_connect_with_new_token_replaces_connection():
    first = FakeConnection(hold=True)
    second = FakeConnection(hold=True)
    opener = FakeOpener(first, second)
    transport = _build(opener)

    transport.connect("old")
    await wait_until(lambda: transport.is_connected())
    transport.connect("new")
    await wait_until(lambda: len(opener.urls) == 2 and transport.is_connected())

    assert opener.urls[1].endswith("token=new")
    assert first.closed
    await transport.aclose()


@pytest.mark.asyncio
async def test_frames_are_translated_into_events():
    record = {"id": 1, "type": "PAYMENT_APPROVED", "title": "Paid", "message": "Approved"}
    connection = FakeConnection(
        _frame("connected", {"userId": 3}),
        _frame("notification", record),
        "not json",
        json.dumps([1, 2]),
        _frame("unread_count", {"count": 2}),
        _frame("unread_count", 5),
        _frame("unread_count", -1),
        _frame("unread_count", {"count": True}),
        _frame("pong"),
        _frame("mystery", {"x": 1}),
        hold=True,
    )
    transport = _build(FakeOpener(connection))
    received = []
    transport.on(NEW_NOTIFICATION, lambda raw: received.append(("notification", raw)))
    transport.on(UNREAD_COUNT, lambda count: received.append(("count", count)))

    transport.connect("abc")
    await wait_until(lambda: len(received) == 3)
    await asyncio.sleep(0)

    assert received == [("notification", record), ("count", 2), ("count", 5)]
    assert transport.is_connected()
    await transport.aclose()


@pytest.mark.asyncio
async def test_unexpected_close_schedules_reconnect():
    first = FakeConnection(_frame("unread_count", 3))
    second = FakeConnection(hold=True)
    opener = FakeOpener(first, second)
    sleep = RecordingSleep()
    transport = _build(opener, sleep)
    connects = []
    disconnects = []
    transport.on(CONNECT, lambda: connects.append(transport.reconnect_attempts))
    transport.on(DISCONNECT, disconnects.append)

    transport.connect("abc")
    await wait_until(lambda: len(connects) == 2)

    assert transport.is_manually_disconnected is False
    assert disconnects == ["Connection closed"]
    assert sleep.delays == [1.0]
    assert sleep.snapshots == [(ConnectionState.CLOSED, 1)]
    assert opener.states == [ConnectionState.CONNECTING, ConnectionState.CONNECTING]
    assert first.closed
    # a successful open resets the retry budget
    assert transport.reconnect_attempts == 0
    assert transport.reconnect_delay == 1.0
    await transport.aclose()


@pytest.mark.asyncio
async def test_unexpected_stream_error_still_schedules_reconnect():
    broken = FakeConnection(
        _frame("unread_count", 1), error=RuntimeError("frame decoder crashed")
    )
    second = FakeConnection(hold=True)
    opener = FakeOpener(broken, second)
    sleep = RecordingSleep()
    transport = _build(opener, sleep)
    counts = []
    disconnects = []
    transport.on(UNREAD_COUNT, counts.append)
    transport.on(DISCONNECT, disconnects.append)

    transport.connect("abc")
    await wait_until(lambda: len(opener.urls) == 2 and transport.is_connected())

    assert counts == [1]
    assert disconnects == ["frame decoder crashed"]
    assert sleep.delays == [1.0]
    assert broken.closed
    await transport.aclose()


@pytest.mark.asyncio
async def test_backoff_doubles_until_exhaustion_then_fails_once():
    opener = FakeOpener()
    sleep = RecordingSleep()
    transport = _build(opener, sleep)
    errors = []
    transport.on(CONNECT_ERROR, errors.append)

    transport.connect("abc")
    await wait_until(lambda: transport.state is ConnectionState.FAILED)
    for _ in range(20):
        await asyncio.sleep(0)

    assert sleep.delays == [1.0, 2.0, 4.0, 8.0, 16.0]
    assert len(opener.urls) == 6
    assert len(errors) == 1
    assert isinstance(errors[0], TransportError)
    assert transport.reconnect_attempts == 5


@pytest.mark.asyncio
async def test_backoff_delay_is_capped():
    opener = FakeOpener()
    sleep = RecordingSleep()
    policy = ReconnectPolicy(base_delay=1.0, max_delay=5.0, max_attempts=6)
    transport = _build(opener, sleep, policy)

    transport.connect("abc")
    await wait_until(lambda: transport.state is ConnectionState.FAILED)

    assert sleep.delays == [1.0, 2.0, 4.0, 5.0, 5.0, 5.0]


@pytest.mark.asyncio
async def test_success_between_failures_resets_backoff():
    opener = FakeOpener(
        OSError("down"),
        FakeConnection(),
        OSError("down"),
        FakeConnection(hold=True),
    )
    sleep = RecordingSleep()
    transport = _build(opener, sleep)

    transport.connect("abc")
    await wait_until(lambda: len(opener.urls) == 4 and transport.is_connected())

    assert sleep.delays == [1.0, 1.0, 2.0]
    await transport.aclose()


@pytest.mark.asyncio
async def test_disconnect_stops_reconnecting_and_clears_handlers():
    connection = FakeConnection(hold=True)
    opener = FakeOpener(connection)
    sleep = RecordingSleep()
    transport = _build(opener, sleep)
    disconnects = []
    transport.on(DISCONNECT, disconnects.append)

    transport.connect("abc")
    await wait_until(lambda: transport.is_connected())
    transport.disconnect()
    await transport.aclose()

    assert transport.state is ConnectionState.IDLE
    assert transport.is_manually_disconnected is True
    assert connection.closed
    assert sleep.delays == []
    assert disconnects == []
    assert len(opener.urls) == 1


@pytest.mark.asyncio
async def test_disconnect_cancels_pending_backoff():
    opener = FakeOpener(FakeConnection())
    sleep = BlockingSleep()
    transport = _build(opener, sleep)

    transport.connect("abc")
    await asyncio.wait_for(sleep.started.wait(), timeout=1)
    await transport.aclose()
    for _ in range(10):
        await asyncio.sleep(0)

    assert sleep.delays == [1.0]
    assert len(opener.urls) == 1
    assert transport.state is ConnectionState.IDLE


@pytest.mark.asyncio
async def test_disconnect_without_connection_is_safe():
    transport = WebSocketTransport(URL, opener=FakeOpener())

    transport.disconnect()
    await transport.aclose()

    assert transport.state is ConnectionState.IDLE


def test_from_settings_uses_client_configuration():
    from kost_console.config import ClientSettings

    settings = ClientSettings(
        stream_url="ws://api.kost.test/notifications/ws",
        reconnect_base_delay=0.5,
        reconnect_max_delay=8,
        reconnect_max_attempts=3,
    )

    transport = WebSocketTransport.from_settings(settings)

    assert transport.url == "ws://api.kost.test/notifications/ws"
    assert transport.policy == ReconnectPolicy(base_delay=0.5, max_delay=8, max_attempts=3)
    assert transport.reconnect_delay == 0.5
