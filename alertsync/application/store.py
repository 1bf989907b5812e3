"""Bounded, deduplicated and persisted list of notifications."""

from __future__ import annotations

import logging
from dataclasses import replace
from typing import Callable, Iterable, Sequence

from alertsync.domain.entities import Notification
from alertsync.domain.errors import MarkAsReadError

from .ports import AlertSink, ReadConfirmer, SnapshotStorage

logger = logging.getLogger(__name__)

NOTIFICATION_LIMIT = 20

Listener = Callable[[tuple[Notification, ...]], None]


class NotificationStore:
    """Single source of truth for the notifications shown to the operator.

    The front of the list is the most recent arrival. Entries carrying an ``id``
    are unique; entries without one can never be matched and are always added.
    Every effective mutation is written through to ``storage`` and announced to
    the registered listeners.
    """

    def __init__(
        self,
        storage: SnapshotStorage | None = None,
        *,
        alerts: AlertSink | None = None,
        confirm_read: ReadConfirmer | None = None,
        limit: int = NOTIFICATION_LIMIT,
    ) -> None:
        if limit <= 0:
            raise ValueError("limit must be a positive integer")
        self._storage = storage
        self._alerts = alerts
        self._confirm_read = confirm_read
        self._limit = limit
        self._items: list[Notification] = []
        self._listeners: list[Listener] = []

    @classmethod
    def restore(
        cls,
        storage: SnapshotStorage,
        *,
        alerts: AlertSink | None = None,
        confirm_read: ReadConfirmer | None = None,
        limit: int = NOTIFICATION_LIMIT,
    ) -> "NotificationStore":
        """Create a store seeded from the snapshot held by ``storage``."""

        store = cls(storage, alerts=alerts, confirm_read=confirm_read, limit=limit)
        try:
            initial = storage.load()
        except Exception:
            logger.exception("Could not read the persisted notification snapshot")
            initial = []
        store.seed(initial)
        return store

    @property
    def limit(self) -> int:
        return self._limit

    def seed(self, initial: Iterable[Notification]) -> None:
        """Replace the list wholesale with ``initial`` (trusted, not deduplicated)."""

        self._items = list(initial)[: self._limit]
        self._commit()

    def push(self, notification: Notification) -> None:
        """Insert a live notification at the front of the list."""

        if self._contains(notification.id):
            logger.debug("Ignoring duplicate notification %s", notification.id)
            return

        self._items.insert(0, notification)
        del self._items[self._limit :]
        self._commit()

        if self._alerts is not None:
            try:
                self._alerts.dispatch(notification)
            except Exception:
                logger.debug("Alert dispatch failed", exc_info=True)

    def merge_backlog(self, items: Iterable[Notification]) -> int:
        """Prepend the historical items that are not held yet.

        Returns the number of items that were added before applying the limit.
        """

        seen = {item.id for item in self._items if item.id is not None}
        missing: list[Notification] = []
        for item in items:
            if item.id is not None:
                if item.id in seen:
                    continue
                seen.add(item.id)
            missing.append(item)

        if not missing:
            return 0

        self._items = (missing + self._items)[: self._limit]
        self._commit()
        return len(missing)

    async def mark_read(self, notification_id: int) -> Notification | None:
        """Mark ``notification_id`` as read once the server confirms it.

        Unknown identifiers are ignored and return ``None``. When the server
        does not confirm, :class:`MarkAsReadError` is raised and the list is
        left untouched.
        """

        if not self._contains(notification_id):
            logger.debug("mark_read ignored for unknown notification %s", notification_id)
            return None
        if self._confirm_read is None:
            raise MarkAsReadError(notification_id, "no read confirmer configured")

        try:
            confirmed = await self._confirm_read(notification_id)
        except MarkAsReadError:
            raise
        except Exception as exc:
            raise MarkAsReadError(notification_id, str(exc) or type(exc).__name__) from exc

        # The entry may have been evicted while the confirmation was pending.
        index = self._index_of(notification_id)
        if index is None:
            return None

        updated = replace(self._items[index], is_read=bool(confirmed.is_read))
        self._items[index] = updated
        self._commit()
        return updated

    def unread_count(self) -> int:
        return sum(1 for item in self._items if not item.is_read)

    def current_list(self) -> tuple[Notification, ...]:
        return tuple(self._items)

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register ``listener`` for "list changed" events; returns an unsubscriber."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _contains(self, notification_id: int | None) -> bool:
        return notification_id is not None and self._index_of(notification_id) is not None

    def _index_of(self, notification_id: int) -> int | None:
        for index, item in enumerate(self._items):
            if item.id == notification_id:
                return index
        return None

    def _commit(self) -> None:
        snapshot = self.current_list()
        self._persist(snapshot)
        for listener in list(self._listeners):
            try:
                listener(snapshot)
            except Exception:
                logger.exception("Notification listener failed")

    def _persist(self, snapshot: Sequence[Notification]) -> None:
        if self._storage is None:
            return
        try:
            self._storage.save(snapshot)
        except Exception:
            logger.exception("Could not persist the notification snapshot")


__all__ = ["NOTIFICATION_LIMIT", "NotificationStore"]
