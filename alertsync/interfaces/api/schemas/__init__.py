from .channel import ChannelActivate, ChannelRead
from .notification import (
    NotificationRead,
    UnreadCountRead,
    UnreadCountReconciliationRead,
)

__all__ = [
    "ChannelActivate",
    "ChannelRead",
    "NotificationRead",
    "UnreadCountRead",
    "UnreadCountReconciliationRead",
]
