"""Process-local notification state fed by the transport and user actions."""

from __future__ import annotations

import logging
from collections.abc import Awaitable, Callable, Container, Hashable, Iterable
from dataclasses import replace
from enum import Enum
from functools import partial
from typing import Any

from .events import (
    CONNECT,
    CONNECT_ERROR,
    DISCONNECT,
    NEW_NOTIFICATION,
    UNREAD_COUNT,
    LocalIdFactory,
    MalformedEventError,
    map_notification,
)
from .gateway import GatewayError, NotificationGateway
from .models import Notification
from .toasts import LoggingToastSink, ToastSink, toast_for
from .transport import NotificationTransport

logger = logging.getLogger(__name__)

Listener = Callable[["NotificationStore"], Any]
IdFactory = Callable[[Container[Any]], Hashable]


class LinkStatus(str, Enum):
    """Connection indicator exposed to the presentation layer."""

    OFFLINE = "offline"
    CONNECTED = "connected"
    RECONNECTING = "reconnecting"
    FAILED = "failed"


class NotificationStore:
    """Single owner of the notification list and the unread counter.

    The list is newest first and is never reordered by read-state changes.
    Read-state mutations are applied optimistically and confirmed through
    the :class:`NotificationGateway`; when the gateway fails, the change is
    reverted without overwriting anything that happened in the meantime.
    """

    def __init__(
        self,
        gateway: NotificationGateway,
        *,
        toast: ToastSink | None = None,
        id_factory: IdFactory | None = None,
    ) -> None:
        self.gateway = gateway
        self._toast = toast or LoggingToastSink()
        self._id_factory = id_factory or LocalIdFactory()
        self._entries: list[Notification] = []
        self._unread_count = 0
        self._revision = 0
        # id -> revision of the last operation that changed its read flag
        self._stamps: dict[Hashable, int] = {}
        # revision -> previous read flags of an operation awaiting the gateway
        self._pending: dict[int, dict[Hashable, bool | None]] = {}
        self._listeners: list[Listener] = []
        self.connection_status = LinkStatus.OFFLINE

    @property
    def notifications(self) -> tuple[Notification, ...]:
        return tuple(self._entries)

    @property
    def unread_count(self) -> int:
        return self._unread_count

    def get(self, notification_id: Hashable) -> Notification | None:
        index = self._index_of(notification_id)
        return None if index is None else self._entries[index]

    # Transport wiring -----------------------------------------------------

    def bind(self, transport: NotificationTransport) -> None:
        transport.on(CONNECT, self.on_connect)
        transport.on(DISCONNECT, self.on_disconnect)
        transport.on(NEW_NOTIFICATION, self.on_new_notification)
        transport.on(UNREAD_COUNT, self.on_unread_count)
        transport.on(CONNECT_ERROR, self.on_connect_error)

    def unbind(self, transport: NotificationTransport) -> None:
        transport.off(CONNECT, self.on_connect)
        transport.off(DISCONNECT, self.on_disconnect)
        transport.off(NEW_NOTIFICATION, self.on_new_notification)
        transport.off(UNREAD_COUNT, self.on_unread_count)
        transport.off(CONNECT_ERROR, self.on_connect_error)
        self._set_status(LinkStatus.OFFLINE)

    # Transport events -----------------------------------------------------

    async def on_connect(self) -> None:
        """Replace the whole list with the server history."""

        self.connection_status = LinkStatus.CONNECTED
        try:
            records = await self.gateway.get_all_notifications()
        except GatewayError as exc:
            logger.warning("Failed to fetch notification history: %s", exc)
            self._notify()
            return

        self._entries = self._map_history(records)
        self._unread_count = sum(1 for entry in self._entries if not entry.read)
        self._revision += 1
        self._stamps.clear()
        logger.info(
            "Loaded %s notifications (%s unread)", len(self._entries), self._unread_count
        )
        self._notify()

    def on_disconnect(self, reason: str | None = None) -> None:
        logger.info("Notification link lost: %s", reason)
        self._set_status(LinkStatus.RECONNECTING)

    def on_connect_error(self, error: Exception | None = None) -> None:
        logger.error("Notification link unavailable: %s", error)
        self._set_status(LinkStatus.FAILED)

    def on_new_notification(self, raw: Any) -> None:
        """Prepend a pushed notification and raise its toast."""

        try:
            notification = map_notification(raw, id_factory=self._next_local_id)
        except MalformedEventError as exc:
            logger.warning("Dropping unparseable notification event: %s", exc)
            return

        index = self._index_of(notification.id)
        if index is not None:
            previous = self._entries.pop(index)
            if not previous.read:
                self._unread_count = max(self._unread_count - 1, 0)
            logger.debug("Replacing notification %s pushed twice", notification.id)

        self._entries.insert(0, notification)
        if not notification.read:
            self._unread_count += 1
        self._revision += 1
        self._stamps.pop(notification.id, None)
        self._notify()

        try:
            self._toast(toast_for(notification))
        except Exception:
            logger.exception("Toast sink failed for notification %s", notification.id)

    def on_unread_count(self, count: int) -> None:
        """Overwrite the counter with the server's authoritative value."""

        self._unread_count = max(int(count), 0)
        self._revision += 1
        self._notify()

    # User actions ---------------------------------------------------------

    async def mark_as_read(self, notification_id: Hashable) -> bool:
        """Mark one entry read; ``False`` when nothing changed or it was reverted."""

        index = self._index_of(notification_id)
        if index is None or self._entries[index].read:
            return False

        def apply() -> dict[Hashable, bool | None]:
            self._set_read(self._index_of(notification_id), True)
            self._unread_count = max(self._unread_count - 1, 0)
            return {notification_id: False}

        remote = None
        if not self._entries[index].local_id:
            remote = partial(self.gateway.mark_as_read, notification_id)

        return await self._optimistic(apply, remote, f"mark {notification_id} as read")

    async def mark_all_as_read(self) -> bool:
        """Mark every entry read and zero the counter."""

        def apply() -> dict[Hashable, bool | None]:
            # Entries already read are covered too, with no flag of their own.
            changed: dict[Hashable, bool | None] = {}
            for index, entry in enumerate(self._entries):
                changed[entry.id] = None if entry.read else False
                if not entry.read:
                    self._set_read(index, True)
            self._unread_count = 0
            return changed

        return await self._optimistic(
            apply, self.gateway.mark_all_as_read, "mark all notifications as read"
        )

    def clear_notification(self, notification_id: Hashable) -> None:
        """Drop one entry from the local list; the server copy is untouched."""

        index = self._index_of(notification_id)
        if index is None:
            return
        removed = self._entries.pop(index)
        if not removed.read:
            self._unread_count = max(self._unread_count - 1, 0)
        self._stamps.pop(removed.id, None)
        self._revision += 1
        self._notify()

    def clear_all_notifications(self) -> None:
        self._entries = []
        self._unread_count = 0
        self._stamps.clear()
        self._revision += 1
        self._notify()

    async def refresh_unread_count(self) -> int | None:
        """Pull the counter from the gateway; ``None`` when the call failed."""

        try:
            count = await self.gateway.get_unread_count()
        except GatewayError as exc:
            logger.warning("Failed to refresh unread count: %s", exc)
            return None
        self.on_unread_count(count)
        return count

    def reset(self) -> None:
        """Forget everything, as on logout."""

        self._entries = []
        self._unread_count = 0
        self._stamps.clear()
        self._revision += 1
        self.connection_status = LinkStatus.OFFLINE
        self._notify()

    # Reactive state -------------------------------------------------------

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Call ``listener(store)`` after every change; returns the unsubscriber."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        for listener in list(self._listeners):
            try:
                listener(self)
            except Exception:
                logger.exception("Notification store listener %r failed", listener)

    def _set_status(self, status: LinkStatus) -> None:
        if self.connection_status is not status:
            self.connection_status = status
            self._notify()

    # Optimistic update machinery -----------------------------------------

    async def _optimistic(
        self,
        apply: Callable[[], dict[Hashable, bool | None]],
        remote: Callable[[], Awaitable[Any]] | None,
        description: str,
    ) -> bool:
        """Snapshot, apply locally, then confirm through ``remote`` or revert.

        ``apply`` returns the previous read flag of every entry it covers,
        ``None`` for entries that were already read.
        """

        snapshot = (list(self._entries), self._unread_count, dict(self._stamps))
        self._revision += 1
        revision = self._revision
        changed = apply()
        prior: dict[Hashable, int | None] = {}
        for notification_id in changed:
            prior[notification_id] = self._stamps.get(notification_id)
            self._stamps[notification_id] = revision
        self._notify()

        if remote is None:
            return True
        self._pending[revision] = changed
        try:
            await remote()
        except GatewayError as exc:
            logger.warning("Failed to %s, reverting: %s", description, exc)
            self._rollback(snapshot, revision, changed, prior)
            return False
        finally:
            del self._pending[revision]
        return True

    def _rollback(
        self,
        snapshot: tuple[list[Notification], int, dict[Hashable, int]],
        revision: int,
        changed: dict[Hashable, bool | None],
        prior: dict[Hashable, int | None],
    ) -> None:
        if self._revision == revision:
            self._entries, self._unread_count, self._stamps = snapshot
        else:
            # Other mutations ran meanwhile: only undo entries nobody touched since.
            restored = 0
            for notification_id, previous in changed.items():
                owner = self._stamps.get(notification_id)
                if owner != revision:
                    newer = self._pending.get(owner)
                    if newer is not None and newer.get(notification_id, False) is None:
                        # The newer operation now decides what this entry falls back to.
                        newer[notification_id] = previous
                    continue
                index = self._index_of(notification_id)
                if previous is not None and index is not None:
                    if self._entries[index].read and not previous:
                        restored += 1
                    self._set_read(index, previous)
                self._restamp(notification_id, prior[notification_id])
            self._unread_count += restored

        # A rollback is itself a mutation for anything still in flight.
        self._revision += 1
        self._notify()

    def _restamp(self, notification_id: Hashable, owner: int | None) -> None:
        if owner in self._pending:
            self._stamps[notification_id] = owner
        else:
            self._stamps.pop(notification_id, None)

    # Helpers --------------------------------------------------------------

    def _index_of(self, notification_id: Hashable) -> int | None:
        for index, entry in enumerate(self._entries):
            if entry.id == notification_id:
                return index
        return None

    def _set_read(self, index: int | None, read: bool) -> None:
        if index is not None:
            self._entries[index] = replace(self._entries[index], read=read)

    def _next_local_id(self) -> Hashable:
        return self._id_factory({entry.id for entry in self._entries})

    def _map_history(self, records: Iterable[Any]) -> list[Notification]:
        entries: list[Notification] = []
        seen: set[Hashable] = set()
        for record in records:
            try:
                notification = map_notification(
                    record, id_factory=lambda: self._id_factory(seen)
                )
            except MalformedEventError as exc:
                logger.warning("Skipping unparseable history record: %s", exc)
                continue
            if notification.id in seen:
                continue
            seen.add(notification.id)
            entries.append(notification)
        return entries


__all__ = ["LinkStatus", "NotificationStore"]
