"""Real-time notification synchronization engine.

The package keeps a bounded, deduplicated list of notifications in sync with a
STOMP push channel and a REST backlog, and persists it across restarts.
"""
