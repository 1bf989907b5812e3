"""Host-facing interfaces of the notification engine."""
