"""Host-facing orchestration of the notification engine."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Mapping

from alertsync.domain.entities import normalize_area

from .store import NotificationStore
from .use_cases.notifications import BacklogReconciler, UnreadCountReconciliation

if TYPE_CHECKING:
    from alertsync.infrastructure.channel import ChannelConnectionManager

logger = logging.getLogger(__name__)


class BearerCredentials:
    """Holder of the access token used on the channel handshake and REST calls."""

    def __init__(self, token: str | None = None) -> None:
        self._token = token or None

    def get(self) -> str | None:
        return self._token

    def update(self, token: str | None) -> None:
        self._token = token or None


def area_for_role(role: str | None, role_areas: Mapping[str, str]) -> str | None:
    """Return the area an operator with ``role`` listens to, if any."""

    if not role:
        return None
    area = role_areas.get(role.strip())
    if area is None:
        folded = {key.casefold(): value for key, value in role_areas.items()}
        area = folded.get(role.strip().casefold())
    return normalize_area(area) if area else None


class NotificationSession:
    """Tie the store, the channel and the backlog reconciler together.

    An activation connects the channel for one area and synchronizes the
    backlog once. Reconnects performed by the channel do not trigger another
    synchronization; a failed fetch is retried by the next activation.
    """

    def __init__(
        self,
        store: NotificationStore,
        channel: "ChannelConnectionManager",
        reconciler: BacklogReconciler,
        *,
        credentials: BearerCredentials | None = None,
        role_areas: Mapping[str, str] | None = None,
    ) -> None:
        self.store = store
        self.channel = channel
        self.reconciler = reconciler
        self.credentials = credentials or BearerCredentials()
        self.role_areas = dict(role_areas or {})
        self._area: str | None = None
        self._synced = False
        self._sync_task: asyncio.Task[None] | None = None

    @property
    def area(self) -> str | None:
        return self._area

    def activate(self, area: str) -> str:
        """Connect the channel for ``area`` and sync its backlog once."""

        area_key = normalize_area(area)
        if not area_key:
            raise ValueError("area must not be empty")
        if area_key != self._area:
            self._cancel_sync()
            self._synced = False
        self._area = area_key

        self.channel.connect(area_key)
        if not self._synced and not self._sync_pending():
            self._sync_task = asyncio.get_running_loop().create_task(
                self._sync_backlog(area_key), name=f"notification-backlog-{area_key}"
            )
        return area_key

    def activate_role(self, role: str | None) -> str | None:
        area = area_for_role(role, self.role_areas)
        if area is None:
            logger.info("Role %r has no notification area; channel not opened", role)
            return None
        return self.activate(area)

    def deactivate(self) -> None:
        self._cancel_sync()
        self._synced = False
        self._area = None
        self.channel.disconnect()

    def update_token(self, token: str | None) -> None:
        """Replace the bearer token; a rejected token no longer blocks ``connect``."""

        self.credentials.update(token)

    async def reconcile_unread_count(self) -> UnreadCountReconciliation | None:
        if self._area is None:
            return None
        return await self.reconciler.fetch_unread_count(self._area)

    async def close(self) -> None:
        task = self._sync_task
        self.deactivate()
        await self.channel.shutdown()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    async def _sync_backlog(self, area: str) -> None:
        if await self.reconciler.fetch_unread(area) is None:
            return
        self._synced = True
        await self.reconciler.fetch_unread_count(area)

    def _sync_pending(self) -> bool:
        return self._sync_task is not None and not self._sync_task.done()

    def _cancel_sync(self) -> None:
        task, self._sync_task = self._sync_task, None
        if task is not None and not task.done():
            task.cancel()


__all__ = ["BearerCredentials", "NotificationSession", "area_for_role"]
