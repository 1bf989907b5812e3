"""Publish "list changed" events of the store to observer websockets."""

from __future__ import annotations

import asyncio
from typing import Any, Sequence

from anyio import from_thread

from alertsync.domain.entities import Notification

from .codec import serialize_notification
from .manager import ObserverConnectionManager


def build_list_message(
    notifications: Sequence[Notification], *, message_type: str = "notifications"
) -> dict[str, Any]:
    """Return the websocket payload describing the current list."""

    return {
        "type": message_type,
        "data": [serialize_notification(notification) for notification in notifications],
        "unread": sum(1 for notification in notifications if not notification.is_read),
    }


class NotificationListPublisher:
    """Store listener that schedules a broadcast of every new list snapshot."""

    def __init__(self, manager: ObserverConnectionManager) -> None:
        self._manager = manager
        self._pending: set[asyncio.Task[None]] = set()

    def __call__(self, notifications: Sequence[Notification]) -> None:
        if not len(self._manager):
            return
        message = build_list_message(notifications)
        try:
            asyncio.get_running_loop()
        except RuntimeError:
            from_thread.run_sync(self._spawn, message)
        else:
            self._spawn(message)

    def _spawn(self, message: dict[str, Any]) -> None:
        task = asyncio.get_running_loop().create_task(self._manager.broadcast(message))
        self._pending.add(task)
        task.add_done_callback(self._pending.discard)


__all__ = ["NotificationListPublisher", "build_list_message"]
