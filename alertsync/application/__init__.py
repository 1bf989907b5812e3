"""Application layer: the notification store and the use cases driving it."""
