"""Value types describing the lifecycle of the push channel."""

from __future__ import annotations

from enum import Enum


class ConnectionState(str, Enum):
    """States of the channel connection manager."""

    DISCONNECTED = "disconnected"
    CONNECTING = "connecting"
    CONNECTED = "connected"
    FAILED = "failed"


class FailureKind(str, Enum):
    """Reason of the last channel failure."""

    AUTHENTICATION = "authentication"
    TRANSPORT = "transport"


def normalize_area(area: str) -> str:
    """Return the canonical (upper-cased) representation of ``area``."""

    return area.strip().upper()


def topic_for_area(area: str) -> str:
    """Return the STOMP destination carrying pushes for ``area``."""

    return f"/topic/notifications/{normalize_area(area)}"


__all__ = ["ConnectionState", "FailureKind", "normalize_area", "topic_for_area"]
