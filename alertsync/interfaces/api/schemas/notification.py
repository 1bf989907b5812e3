"""Pydantic models describing notification payloads."""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field

from alertsync.domain.entities import Notification


class NotificationRead(BaseModel):
    """Representation of a notification delivered to the client."""

    model_config = ConfigDict(populate_by_name=True)

    id: int | None = None
    message: str
    area: str
    reference_id: int | None = Field(default=None, serialization_alias="referenceId")
    timestamp: datetime | None = None
    is_read: bool = Field(default=False, serialization_alias="isRead")

    @classmethod
    def from_entity(cls, notification: Notification) -> "NotificationRead":
        return cls(
            id=notification.id,
            message=notification.message,
            area=notification.area,
            reference_id=notification.reference_id,
            timestamp=notification.timestamp,
            is_read=notification.is_read,
        )


class UnreadCountRead(BaseModel):
    """Unread count derived from the local list."""

    unread: int


class UnreadCountReconciliationRead(BaseModel):
    """Local and server unread counts side by side; the local one is authoritative."""

    area: str
    local: int
    remote: int
    in_sync: bool


__all__ = ["NotificationRead", "UnreadCountRead", "UnreadCountReconciliationRead"]
