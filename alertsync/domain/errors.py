"""Exception hierarchy of the notification engine."""

from __future__ import annotations


class AlertSyncError(Exception):
    """Base class for every error raised by the engine."""


class ChannelError(AlertSyncError):
    """The push channel could not be opened or was closed abnormally."""


class ChannelAuthenticationError(ChannelError):
    """The channel handshake was rejected because of the credentials."""


class ChannelTransportError(ChannelError):
    """Network level failure; a later reconnect may succeed."""


class MalformedPayloadError(AlertSyncError):
    """A push or a REST response could not be parsed into notifications."""


class MarkAsReadError(AlertSyncError):
    """The server did not confirm a mark-as-read request."""

    def __init__(self, notification_id: int, reason: str) -> None:
        super().__init__(f"Notification {notification_id} could not be marked as read: {reason}")
        self.notification_id = notification_id


class SnapshotStorageError(AlertSyncError):
    """The persisted snapshot could not be read or written."""


__all__ = [
    "AlertSyncError",
    "ChannelError",
    "ChannelAuthenticationError",
    "ChannelTransportError",
    "MalformedPayloadError",
    "MarkAsReadError",
    "SnapshotStorageError",
]
