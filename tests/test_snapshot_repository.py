"""Tests for the SQL-backed notification snapshot."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alertsync.application.store import NotificationStore
from alertsync.domain.entities import Notification
from alertsync.domain.errors import SnapshotStorageError
from alertsync.infrastructure.database import (
    build_engine,
    build_session_factory,
    initialize_database,
)
from alertsync.infrastructure.models import StorageEntryModel
from alertsync.infrastructure.repositories import SnapshotRepository
from fakes import make_notification


@pytest.fixture()
def session_factory(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'snapshot.db'}")
    initialize_database(engine)
    try:
        yield build_session_factory(engine)
    finally:
        engine.dispose()


def test_load_without_saved_value_returns_empty(session_factory) -> None:
    assert SnapshotRepository(session_factory).load() == []


def test_save_and_load_preserves_order_and_fields(session_factory) -> None:
    repository = SnapshotRepository(session_factory)
    stamped = Notification(
        id=3,
        message="Asignación con fecha",
        area="DOSAJE",
        reference_id=30,
        timestamp=datetime(2024, 5, 1, 15, 0, tzinfo=timezone.utc),
        is_read=True,
    )
    repository.save([stamped, make_notification(2), make_notification(1)])

    restored = repository.load()

    assert [item.id for item in restored] == [3, 2, 1]
    assert restored[0].reference_id == 30
    assert restored[0].is_read is True
    assert restored[0].timestamp == stamped.timestamp


def test_save_overwrites_previous_value(session_factory) -> None:
    repository = SnapshotRepository(session_factory)
    repository.save([make_notification(1)])
    repository.save([make_notification(2), make_notification(1)])

    assert [item.id for item in repository.load()] == [2, 1]
    with session_factory() as session:
        assert session.query(StorageEntryModel).count() == 1


def test_keys_are_isolated(session_factory) -> None:
    SnapshotRepository(session_factory, key="a").save([make_notification(1)])

    assert SnapshotRepository(session_factory, key="b").load() == []


def test_corrupted_value_raises_storage_error(session_factory) -> None:
    with session_factory() as session:
        session.add(StorageEntryModel(key="notifications", value="{not json"))
        session.commit()

    with pytest.raises(SnapshotStorageError):
        SnapshotRepository(session_factory).load()


def test_store_restores_from_corrupted_snapshot_as_empty(session_factory) -> None:
    with session_factory() as session:
        session.add(StorageEntryModel(key="notifications", value='[{"id": 1}]'))
        session.commit()
    repository = SnapshotRepository(session_factory)

    store = NotificationStore.restore(repository)
    assert store.current_list() == ()

    store.push(make_notification(9))
    assert [item.id for item in repository.load()] == [9]
