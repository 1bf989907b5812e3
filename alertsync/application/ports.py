"""Interfaces the application layer expects from the infrastructure."""

from __future__ import annotations

from typing import AsyncIterator, Awaitable, Callable, Mapping, Optional, Protocol, Sequence

from alertsync.domain.entities import Notification


class SnapshotStorage(Protocol):
    """Durable storage for the ordered notification list."""

    def load(self) -> list[Notification]:
        ...

    def save(self, notifications: Sequence[Notification]) -> None:
        ...


class AlertSink(Protocol):
    """Receiver of "new live notification" events (sound, vibration...)."""

    def dispatch(self, notification: Notification) -> None:
        ...


class NotificationApi(Protocol):
    """REST operations offered by the notification server."""

    async def list_unread(self, area: str) -> list[Notification]:
        ...

    async def count_unread(self, area: str) -> int:
        ...

    async def mark_as_read(self, notification_id: int) -> Notification:
        ...


class ChannelTransport(Protocol):
    """A single live session on the push channel."""

    async def open(self, headers: Mapping[str, str]) -> None:
        """Perform the handshake; raise a ``ChannelError`` subclass on failure."""

    async def subscribe(self, destination: str) -> None:
        ...

    def messages(self) -> AsyncIterator[str]:
        """Yield message bodies until the session ends."""

    async def close(self) -> None:
        ...


ReadConfirmer = Callable[[int], Awaitable[Notification]]
TransportFactory = Callable[[], ChannelTransport]
TokenProvider = Callable[[], Optional[str]]


__all__ = [
    "AlertSink",
    "ChannelTransport",
    "NotificationApi",
    "ReadConfirmer",
    "SnapshotStorage",
    "TokenProvider",
    "TransportFactory",
]
