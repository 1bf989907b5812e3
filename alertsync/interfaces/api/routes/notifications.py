"""Endpoints and websocket handler exposing the notification store."""

from __future__ import annotations

import logging
from typing import Any

from fastapi import (
    APIRouter,
    Depends,
    HTTPException,
    Response,
    WebSocket,
    WebSocketDisconnect,
    status,
)

from alertsync.application.session import NotificationSession
from alertsync.domain.errors import MarkAsReadError
from alertsync.infrastructure.notifications import build_list_message, serialize_notification
from alertsync.interfaces.api.dependencies import get_session
from alertsync.interfaces.api.schemas import (
    NotificationRead,
    UnreadCountRead,
    UnreadCountReconciliationRead,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/notifications", tags=["notifications"])


@router.get("", response_model=list[NotificationRead])
async def list_notifications(
    session: NotificationSession = Depends(get_session),
) -> list[NotificationRead]:
    """Return the current list, most recent first."""

    return [NotificationRead.from_entity(item) for item in session.store.current_list()]


@router.get("/unread-count", response_model=UnreadCountRead)
async def unread_count(session: NotificationSession = Depends(get_session)) -> UnreadCountRead:
    return UnreadCountRead(unread=session.store.unread_count())


@router.get("/unread-count/server", response_model=UnreadCountReconciliationRead)
async def reconcile_unread_count(
    session: NotificationSession = Depends(get_session),
) -> UnreadCountReconciliationRead:
    """Compare the local unread count with the one reported by the server."""

    result = await session.reconcile_unread_count()
    if result is None:
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail="Server unread count unavailable",
        )
    return UnreadCountReconciliationRead(
        area=result.area, local=result.local, remote=result.remote, in_sync=result.in_sync
    )


@router.put(
    "/{notification_id}/read",
    response_model=NotificationRead,
    responses={status.HTTP_204_NO_CONTENT: {"description": "Unknown notification"}},
)
async def mark_notification_read(
    notification_id: int,
    session: NotificationSession = Depends(get_session),
) -> Any:
    """Mark a notification as read once the server confirms it."""

    try:
        updated = await session.store.mark_read(notification_id)
    except MarkAsReadError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    if updated is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return NotificationRead.from_entity(updated)


@router.websocket("/ws")
async def notifications_websocket(websocket: WebSocket) -> None:
    """Stream the list to a local observer every time it changes."""

    runtime = getattr(websocket.app.state, "notification_runtime", None)
    observers = getattr(websocket.app.state, "observers", None)
    if runtime is None or observers is None:
        await websocket.close(code=1011)
        return

    store = runtime.session.store
    await observers.connect(websocket)
    try:
        await websocket.send_json(build_list_message(store.current_list(), message_type="init"))
        while True:
            try:
                message = await websocket.receive_json()
            except WebSocketDisconnect:
                raise
            except Exception:
                continue

            if not isinstance(message, dict):
                continue

            message_type = message.get("type")
            if message_type == "ping":
                await websocket.send_json({"type": "pong"})
                continue

            if message_type == "read":
                notification_id = message.get("id")
                if not isinstance(notification_id, int):
                    continue
                try:
                    updated = await store.mark_read(notification_id)
                except MarkAsReadError as exc:
                    await websocket.send_json(
                        {"type": "error", "id": notification_id, "detail": str(exc)}
                    )
                    continue
                if updated is not None:
                    await websocket.send_json(
                        {"type": "read", "data": serialize_notification(updated)}
                    )
    except WebSocketDisconnect:
        observers.disconnect(websocket)
    except Exception:  # pragma: no cover - depends on client behaviour
        observers.disconnect(websocket)
        raise
