"""Domain entity representing a pushed notification."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class Notification:
    """Alert delivered to the operators of an area.

    ``timestamp`` is informative only; list order is decided by arrival.
    """

    id: int | None
    message: str
    area: str
    reference_id: int | None = None
    timestamp: datetime | None = None
    is_read: bool = False


__all__ = ["Notification"]
