"""Wire formats and realtime fan-out of notifications."""

from .codec import (
    dump_notifications,
    parse_notification,
    parse_notification_list,
    serialize_notification,
)
from .manager import ObserverConnectionManager
from .publisher import NotificationListPublisher, build_list_message

__all__ = [
    "NotificationListPublisher",
    "ObserverConnectionManager",
    "build_list_message",
    "dump_notifications",
    "parse_notification",
    "parse_notification_list",
    "serialize_notification",
]
