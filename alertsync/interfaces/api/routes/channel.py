"""Endpoints controlling the push channel subscription."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Response, status

from alertsync.application.session import NotificationSession
from alertsync.interfaces.api.dependencies import get_session
from alertsync.interfaces.api.schemas import ChannelActivate, ChannelRead

router = APIRouter(prefix="/channel", tags=["channel"])


def _channel_state(session: NotificationSession) -> ChannelRead:
    channel = session.channel
    return ChannelRead(
        state=channel.state, area=channel.area, last_failure=channel.last_failure
    )


@router.get("", response_model=ChannelRead)
async def get_channel(session: NotificationSession = Depends(get_session)) -> ChannelRead:
    return _channel_state(session)


@router.put("", response_model=ChannelRead, status_code=status.HTTP_202_ACCEPTED)
async def activate_channel(
    payload: ChannelActivate,
    session: NotificationSession = Depends(get_session),
) -> ChannelRead:
    """Open the channel for an area (or the area of a role) and sync its backlog."""

    if payload.token is not None:
        session.update_token(payload.token)

    if payload.area and payload.area.strip():
        session.activate(payload.area)
    elif session.activate_role(payload.role) is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="An area or a role with a notification area is required",
        )
    return _channel_state(session)


@router.delete("", status_code=status.HTTP_204_NO_CONTENT)
async def deactivate_channel(session: NotificationSession = Depends(get_session)) -> Response:
    session.deactivate()
    return Response(status_code=status.HTTP_204_NO_CONTENT)
