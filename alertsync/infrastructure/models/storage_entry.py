"""SQLAlchemy model for the key/value entries holding persisted snapshots."""

from datetime import datetime, timezone

from sqlalchemy import Column, DateTime, String, Text

from alertsync.infrastructure.database import Base


def _utcnow() -> datetime:
    return datetime.now(timezone.utc).replace(tzinfo=None)


class StorageEntryModel(Base):
    """Serialized value stored under a unique key."""

    __tablename__ = "storage_entry"

    key = Column(String(120), primary_key=True)
    value = Column(Text, nullable=False)
    updated_at = Column(DateTime(), nullable=False, default=_utcnow, onupdate=_utcnow)


__all__ = ["StorageEntryModel"]
