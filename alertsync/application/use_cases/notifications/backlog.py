"""One-shot synchronization of the server-held unread notifications."""

from __future__ import annotations

import logging
from dataclasses import dataclass

import httpx

from alertsync.application.ports import NotificationApi
from alertsync.application.store import NotificationStore
from alertsync.domain.entities import normalize_area
from alertsync.domain.errors import MalformedPayloadError

logger = logging.getLogger(__name__)

_FETCH_ERRORS = (httpx.HTTPError, MalformedPayloadError)


@dataclass(frozen=True)
class UnreadCountReconciliation:
    """Locally derived unread count next to the one reported by the server.

    The local value is authoritative; a mismatch is reported, never corrected.
    """

    area: str
    local: int
    remote: int

    @property
    def in_sync(self) -> bool:
        return self.local == self.remote


class BacklogReconciler:
    """Fetch historical unread items and merge them into the store."""

    def __init__(self, api: NotificationApi, store: NotificationStore) -> None:
        self._api = api
        self._store = store

    async def fetch_unread(self, area: str) -> int | None:
        """Merge the unread backlog of ``area``; returns the fetched size or ``None``."""

        area_key = normalize_area(area)
        try:
            items = await self._api.list_unread(area_key)
        except _FETCH_ERRORS as exc:
            logger.warning("Could not fetch unread notifications for %s: %s", area_key, exc)
            return None

        added = self._store.merge_backlog(items)
        logger.info(
            "Backlog for %s: %s unread fetched, %s new", area_key, len(items), added
        )
        return len(items)

    async def fetch_unread_count(self, area: str) -> UnreadCountReconciliation | None:
        area_key = normalize_area(area)
        try:
            remote = await self._api.count_unread(area_key)
        except _FETCH_ERRORS as exc:
            logger.warning("Could not fetch the unread count for %s: %s", area_key, exc)
            return None

        result = UnreadCountReconciliation(
            area=area_key, local=self._store.unread_count(), remote=remote
        )
        if not result.in_sync:
            logger.info(
                "Unread count mismatch for %s: local=%s server=%s (keeping local)",
                area_key,
                result.local,
                result.remote,
            )
        return result


__all__ = ["BacklogReconciler", "UnreadCountReconciliation"]
