"""Notification use cases."""

from .backlog import BacklogReconciler, UnreadCountReconciliation

__all__ = ["BacklogReconciler", "UnreadCountReconciliation"]
