"""Pydantic models describing the push channel lifecycle."""

from __future__ import annotations

from pydantic import BaseModel, Field

from alertsync.domain.entities import ConnectionState, FailureKind


class ChannelActivate(BaseModel):
    """Request to open the channel for an area, given directly or through a role."""

    area: str | None = Field(default=None, description="Area key, e.g. TOXICOLOGIA")
    role: str | None = Field(default=None, description="Operator role used to derive the area")
    token: str | None = Field(default=None, description="Bearer token replacing the current one")


class ChannelRead(BaseModel):
    """Observable state of the channel connection."""

    state: ConnectionState
    area: str | None = None
    last_failure: FailureKind | None = None


__all__ = ["ChannelActivate", "ChannelRead"]
