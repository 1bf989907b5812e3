"""Repository implementations for infrastructure layer."""

from .snapshot_repository import SnapshotRepository

__all__ = ["SnapshotRepository"]
