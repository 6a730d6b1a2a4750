"""HTTP client for the ``/notifications`` REST routes."""

from __future__ import annotations

import logging
from collections.abc import Hashable
from typing import Any

import httpx

from kost_console.config import ClientSettings

logger = logging.getLogger(__name__)


class GatewayError(Exception):
    """Base error for notification gateway failures."""


class GatewayAuthError(GatewayError):
    """Raised when the API rejects the bearer token."""


class GatewayNotFoundError(GatewayError):
    """Raised when the notification does not exist for the current user."""


class GatewayConnectionError(GatewayError):
    """Raised when the API cannot be reached or times out."""


class GatewayRequestError(GatewayError):
    """Raised for any other unsuccessful response."""


class NotificationGateway:
    """Request/response access to notification history and read state."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout: float = 10.0,
        http: httpx.AsyncClient | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.http = http or httpx.AsyncClient(
            base_url=f"{self.base_url}/notifications",
            timeout=timeout,
            headers={"Content-Type": "application/json"},
        )

    @classmethod
    def from_settings(cls, settings: ClientSettings) -> "NotificationGateway":
        return cls(settings.api_base_url, timeout=settings.request_timeout)

    def set_auth_token(self, token: str | None) -> None:
        """Attach ``token`` as bearer credential, or drop it when ``None``."""

        if token:
            self.http.headers["Authorization"] = f"Bearer {token}"
        else:
            self.http.headers.pop("Authorization", None)

    async def aclose(self) -> None:
        await self.http.aclose()

    async def _request(self, method: str, path: str) -> Any:
        try:
            response = await self.http.request(method, path)
        except httpx.TimeoutException as exc:
            raise GatewayConnectionError(f"Request to {path} timed out") from exc
        except httpx.HTTPError as exc:
            raise GatewayConnectionError(f"Request to {path} failed: {exc}") from exc

        if response.status_code in {401, 403}:
            raise GatewayAuthError(f"Unauthorized ({response.status_code})")
        if response.status_code == 404:
            raise GatewayNotFoundError(f"{path} not found")
        if response.status_code >= 400:
            raise GatewayRequestError(f"Request to {path} failed ({response.status_code})")

        try:
            return response.json()
        except ValueError as exc:
            raise GatewayRequestError(f"Invalid JSON from {path}") from exc

    async def get_all_notifications(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/")
        if not isinstance(data, list):
            raise GatewayRequestError("Notification history must be a list")
        return data

    async def get_unread_notifications(self) -> list[dict[str, Any]]:
        data = await self._request("GET", "/unread")
        if not isinstance(data, list):
            raise GatewayRequestError("Unread notifications must be a list")
        return data

    async def get_unread_count(self) -> int:
        data = await self._request("GET", "/unread/count")
        count = data.get("count") if isinstance(data, dict) else None
        if isinstance(count, bool) or not isinstance(count, int) or count < 0:
            raise GatewayRequestError(f"Invalid unread count payload: {data!r}")
        return count

    async def mark_as_read(self, notification_id: Hashable) -> dict[str, Any]:
        logger.debug("Marking notification %s as read", notification_id)
        return await self._request("PATCH", f"/{notification_id}/read")

    async def mark_all_as_read(self) -> dict[str, Any]:
        logger.debug("Marking all notifications as read")
        return await self._request("PATCH", "/read-all")


__all__ = [
    "GatewayAuthError",
    "GatewayConnectionError",
    "GatewayError",
    "GatewayNotFoundError",
    "GatewayRequestError",
    "NotificationGateway",
]
