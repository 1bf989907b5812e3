"""HTTP client for the notification REST endpoints."""

from __future__ import annotations

import logging
from typing import Any

import httpx

from alertsync.application.ports import TokenProvider
from alertsync.domain.entities import Notification, normalize_area
from alertsync.domain.errors import MalformedPayloadError
from alertsync.infrastructure.notifications.codec import (
    parse_notification,
    parse_notification_list,
)

logger = logging.getLogger(__name__)


class NotificationApiClient:
    """Async client for backlog, unread count and mark-as-read requests.

    Endpoints (relative to ``base_url``):

    - ``GET  /notifications/area/{AREA}/unread``
    - ``GET  /notifications/area/{AREA}/count-unread``
    - ``PUT  /notifications/{id}/read``

    HTTP failures surface as :class:`httpx.HTTPError`; bodies that cannot be
    parsed raise :class:`MalformedPayloadError`.
    """

    def __init__(
        self,
        base_url: str,
        *,
        token_provider: TokenProvider | None = None,
        timeout: float = 10.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._token_provider = token_provider
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            limits=httpx.Limits(max_keepalive_connections=5, max_connections=10),
        )

    async def list_unread(self, area: str) -> list[Notification]:
        response = await self._request("GET", f"/notifications/area/{normalize_area(area)}/unread")
        return parse_notification_list(response.content)

    async def count_unread(self, area: str) -> int:
        response = await self._request(
            "GET", f"/notifications/area/{normalize_area(area)}/count-unread"
        )
        payload = self._json(response)
        if isinstance(payload, bool) or not isinstance(payload, int):
            raise MalformedPayloadError(f"Unread count is not an integer: {payload!r}")
        return payload

    async def mark_as_read(self, notification_id: int) -> Notification:
        response = await self._request("PUT", f"/notifications/{notification_id}/read", json={})
        return parse_notification(response.content)

    async def aclose(self) -> None:
        await self.client.aclose()

    async def _request(self, method: str, url: str, **kwargs: Any) -> httpx.Response:
        response = await self.client.request(method, url, headers=self._headers(), **kwargs)
        if response.is_error:
            logger.debug("%s %s answered %s", method, url, response.status_code)
        response.raise_for_status()
        return response

    def _headers(self) -> dict[str, str]:
        token = self._token_provider() if self._token_provider else None
        if not token:
            return {}
        return {"Authorization": f"Bearer {token}"}

    @staticmethod
    def _json(response: httpx.Response) -> Any:
        try:
            return response.json()
        except ValueError as exc:
            raise MalformedPayloadError("Response body is not valid JSON") from exc


__all__ = ["NotificationApiClient"]
