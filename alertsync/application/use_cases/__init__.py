"""Aggregate application use cases."""

from .notifications import BacklogReconciler, UnreadCountReconciliation

__all__ = ["BacklogReconciler", "UnreadCountReconciliation"]
