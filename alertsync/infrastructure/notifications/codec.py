"""Conversion between wire JSON payloads and :class:`Notification` entities."""

from __future__ import annotations

import json
from datetime import datetime
from typing import Any, Iterable

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, TypeAdapter, ValidationError

from alertsync.domain.entities import Notification
from alertsync.domain.errors import MalformedPayloadError
from alertsync.utils import ensure_app_timezone


class NotificationPayload(BaseModel):
    """Wire representation of a notification as produced by the server."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: int | None = None
    message: str
    area: str
    reference_id: int | None = Field(
        default=None,
        validation_alias=AliasChoices("referenceId", "asignacionId", "reference_id"),
    )
    timestamp: datetime | None = None
    is_read: bool | None = Field(
        default=False, validation_alias=AliasChoices("isRead", "read", "is_read")
    )

    def to_entity(self) -> Notification:
        return Notification(
            id=self.id,
            message=self.message,
            area=self.area,
            reference_id=self.reference_id,
            timestamp=ensure_app_timezone(self.timestamp),
            is_read=bool(self.is_read),
        )


_payload_list = TypeAdapter(list[NotificationPayload])


def parse_notification(raw: str | bytes | dict[str, Any]) -> Notification:
    """Parse a single notification, raising :class:`MalformedPayloadError` on bad input."""

    try:
        if isinstance(raw, dict):
            payload = NotificationPayload.model_validate(raw)
        else:
            payload = NotificationPayload.model_validate_json(raw)
    except ValidationError as exc:
        raise MalformedPayloadError(f"Invalid notification payload: {exc}") from exc
    return payload.to_entity()


def parse_notification_list(raw: str | bytes | list[Any]) -> list[Notification]:
    """Parse a JSON array of notifications."""

    try:
        if isinstance(raw, list):
            payloads = _payload_list.validate_python(raw)
        else:
            payloads = _payload_list.validate_json(raw)
    except ValidationError as exc:
        raise MalformedPayloadError(f"Invalid notification list: {exc}") from exc
    return [payload.to_entity() for payload in payloads]


def serialize_notification(notification: Notification) -> dict[str, Any]:
    """Return the camelCase JSON representation of ``notification``."""

    return {
        "id": notification.id,
        "message": notification.message,
        "area": notification.area,
        "referenceId": notification.reference_id,
        "timestamp": notification.timestamp.isoformat()
        if notification.timestamp
        else None,
        "isRead": notification.is_read,
    }


def dump_notifications(notifications: Iterable[Notification]) -> str:
    """Serialize ``notifications`` as a JSON array preserving their order."""

    return json.dumps(
        [serialize_notification(notification) for notification in notifications],
        ensure_ascii=False,
    )


__all__ = [
    "NotificationPayload",
    "dump_notifications",
    "parse_notification",
    "parse_notification_list",
    "serialize_notification",
]
