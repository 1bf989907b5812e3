"""Domain entities exposed by the application."""

from .connection import ConnectionState, FailureKind, normalize_area, topic_for_area
from .notification import Notification

__all__ = [
    "ConnectionState",
    "FailureKind",
    "Notification",
    "normalize_area",
    "topic_for_area",
]
