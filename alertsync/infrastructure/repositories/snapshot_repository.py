"""Persistence helpers for the notification snapshot."""

from __future__ import annotations

from collections.abc import Sequence

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from alertsync.domain.entities import Notification
from alertsync.domain.errors import MalformedPayloadError, SnapshotStorageError
from alertsync.infrastructure.models import StorageEntryModel
from alertsync.infrastructure.notifications.codec import (
    dump_notifications,
    parse_notification_list,
)


class SnapshotRepository:
    """Store the ordered notification list as a single JSON value under ``key``."""

    def __init__(self, session_factory: sessionmaker, *, key: str = "notifications") -> None:
        self._session_factory = session_factory
        self.key = key

    def load(self) -> list[Notification]:
        """Return the persisted list, or an empty list when nothing was saved yet."""

        try:
            with self._session_factory() as session:
                model = session.get(StorageEntryModel, self.key)
                raw = model.value if model is not None else None
        except SQLAlchemyError as exc:
            raise SnapshotStorageError(f"Could not read snapshot '{self.key}'") from exc

        if not raw:
            return []
        try:
            return parse_notification_list(raw)
        except MalformedPayloadError as exc:
            raise SnapshotStorageError(f"Snapshot '{self.key}' is corrupted") from exc

    def save(self, notifications: Sequence[Notification]) -> None:
        """Overwrite the persisted value with ``notifications``."""

        payload = dump_notifications(notifications)
        try:
            with self._session_factory() as session:
                self._upsert(session, payload)
                session.commit()
        except SQLAlchemyError as exc:
            raise SnapshotStorageError(f"Could not write snapshot '{self.key}'") from exc

    def _upsert(self, session: Session, payload: str) -> None:
        model = session.get(StorageEntryModel, self.key)
        if model is None:
            model = StorageEntryModel(key=self.key, value=payload)
        else:
            model.value = payload
        session.add(model)


__all__ = ["SnapshotRepository"]
