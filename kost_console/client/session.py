"""Lifecycle wiring of transport, store and gateway for one login session."""

from __future__ import annotations

import logging

from kost_console.config import ClientSettings, get_client_settings

from .gateway import NotificationGateway
from .store import NotificationStore
from .toasts import ToastSink
from .transport import NotificationTransport, WebSocketTransport

logger = logging.getLogger(__name__)


class NotificationSession:
    """Explicitly constructed owner of the realtime notification stack.

    ``start`` must be called from a running event loop; the transport keeps
    its connection task on that loop until :meth:`stop` or :meth:`aclose`.
    """

    def __init__(
        self,
        transport: NotificationTransport,
        store: NotificationStore,
        gateway: NotificationGateway,
    ) -> None:
        self.transport = transport
        self.store = store
        self.gateway = gateway
        self._bound = False

    @classmethod
    def from_settings(
        cls, settings: ClientSettings | None = None, *, toast: ToastSink | None = None
    ) -> "NotificationSession":
        settings = settings or get_client_settings()
        gateway = NotificationGateway.from_settings(settings)
        store = NotificationStore(gateway, toast=toast)
        transport = WebSocketTransport.from_settings(settings)
        return cls(transport, store, gateway)

    @property
    def is_started(self) -> bool:
        return self._bound

    def start(self, token: str) -> None:
        """Apply ``token`` everywhere and open the push connection."""

        if not token:
            raise ValueError("Token is required to start a notification session")

        self.gateway.set_auth_token(token)
        if not self._bound:
            # The transport drops every subscription on disconnect.
            self.store.bind(self.transport)
            self._bound = True
        self.transport.connect(token)
        logger.info("Notification session started")

    def stop(self) -> None:
        """Tear the session down, as on logout."""

        self.transport.disconnect()
        if self._bound:
            self.store.unbind(self.transport)
            self._bound = False
        self.store.reset()
        self.gateway.set_auth_token(None)
        logger.info("Notification session stopped")

    async def aclose(self) -> None:
        self.stop()
        await self.transport.aclose()
        await self.gateway.aclose()

    async def __aenter__(self) -> "NotificationSession":
        return self

    async def __aexit__(self, *exc_info: object) -> None:
        await self.aclose()


__all__ = ["NotificationSession"]
