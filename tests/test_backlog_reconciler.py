"""Tests for the REST client and the one-shot backlog synchronization."""

from __future__ import annotations

import json
import sys
from pathlib import Path

import httpx
import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alertsync.application.store import NotificationStore
from alertsync.application.use_cases.notifications import BacklogReconciler
from alertsync.domain.errors import MalformedPayloadError
from alertsync.infrastructure.api_client import NotificationApiClient
from fakes import RecordingAlerts, make_notification

pytestmark = pytest.mark.anyio

UNREAD = [
    {"id": 11, "message": "Asignación 11", "area": "DOSAJE", "asignacionId": 11, "isRead": False},
    {"id": 12, "message": "Asignación 12", "area": "DOSAJE", "asignacionId": 12, "isRead": False},
]


def _client(handler, token: str | None = "secret") -> NotificationApiClient:
    return NotificationApiClient(
        "http://server/api/",
        token_provider=lambda: token,
        transport=httpx.MockTransport(handler),
    )


async def test_client_requests_area_scoped_endpoints_with_bearer_token() -> None:
    seen: list[tuple[str, str, str | None]] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append((request.method, request.url.path, request.headers.get("Authorization")))
        if request.url.path.endswith("/unread"):
            return httpx.Response(200, json=UNREAD)
        if request.url.path.endswith("/count-unread"):
            return httpx.Response(200, json=2)
        return httpx.Response(200, json={**UNREAD[0], "isRead": True})

    client = _client(handler)
    try:
        unread = await client.list_unread("dosaje")
        count = await client.count_unread("dosaje")
        updated = await client.mark_as_read(11)
    finally:
        await client.aclose()

    assert [item.id for item in unread] == [11, 12]
    assert count == 2
    assert updated.is_read is True
    assert seen == [
        ("GET", "/api/notifications/area/DOSAJE/unread", "Bearer secret"),
        ("GET", "/api/notifications/area/DOSAJE/count-unread", "Bearer secret"),
        ("PUT", "/api/notifications/11/read", "Bearer secret"),
    ]


async def test_client_omits_authorization_without_token() -> None:
    headers: list[str | None] = []

    def handler(request: httpx.Request) -> httpx.Response:
        headers.append(request.headers.get("Authorization"))
        return httpx.Response(200, json=0)

    client = _client(handler, token=None)
    try:
        await client.count_unread("DOSAJE")
    finally:
        await client.aclose()

    assert headers == [None]


async def test_client_rejects_non_integer_count() -> None:
    client = _client(lambda request: httpx.Response(200, json={"count": 2}))
    try:
        with pytest.raises(MalformedPayloadError):
            await client.count_unread("DOSAJE")
    finally:
        await client.aclose()


async def test_fetch_unread_merges_silently_into_store() -> None:
    alerts = RecordingAlerts()
    store = NotificationStore(alerts=alerts)
    store.push(make_notification(12, area="DOSAJE"))
    alerts.dispatched.clear()
    client = _client(lambda request: httpx.Response(200, json=UNREAD))
    reconciler = BacklogReconciler(client, store)

    try:
        fetched = await reconciler.fetch_unread("DOSAJE")
    finally:
        await client.aclose()

    assert fetched == 2
    assert [item.id for item in store.current_list()] == [11, 12]
    assert alerts.dispatched == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(500, text="boom"),
        httpx.Response(401, json={"error": "unauthorized"}),
        httpx.Response(200, text="<html>"),
        httpx.Response(200, json=[{"id": 1}]),
    ],
)
async def test_fetch_unread_failure_leaves_store_unchanged(response, caplog) -> None:
    store = NotificationStore()
    store.push(make_notification(1))
    client = _client(lambda request: response)
    reconciler = BacklogReconciler(client, store)

    with caplog.at_level("WARNING"):
        try:
            result = await reconciler.fetch_unread("DOSAJE")
        finally:
            await client.aclose()

    assert result is None
    assert [item.id for item in store.current_list()] == [1]
    assert "Could not fetch unread notifications" in caplog.text


async def test_fetch_unread_network_error_is_logged() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        raise httpx.ConnectError("connection refused", request=request)

    store = NotificationStore()
    client = _client(handler)
    try:
        assert await BacklogReconciler(client, store).fetch_unread("DOSAJE") is None
    finally:
        await client.aclose()


async def test_unread_count_mismatch_keeps_local_value(caplog) -> None:
    store = NotificationStore()
    store.seed([make_notification(1), make_notification(2, is_read=True)])
    client = _client(lambda request: httpx.Response(200, json=5))
    reconciler = BacklogReconciler(client, store)

    with caplog.at_level("INFO"):
        try:
            result = await reconciler.fetch_unread_count("dosaje")
        finally:
            await client.aclose()

    assert result is not None
    assert (result.area, result.local, result.remote, result.in_sync) == ("DOSAJE", 1, 5, False)
    assert store.unread_count() == 1
    assert "mismatch" in caplog.text


async def test_unread_count_failure_returns_none() -> None:
    client = _client(lambda request: httpx.Response(503))
    try:
        result = await BacklogReconciler(client, NotificationStore()).fetch_unread_count("DOSAJE")
    finally:
        await client.aclose()

    assert result is None


async def test_mark_read_through_client_updates_store() -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        body = {"id": 5, "message": "m", "area": "DOSAJE", "isRead": True}
        return httpx.Response(200, content=json.dumps(body))

    client = _client(handler)
    store = NotificationStore(confirm_read=client.mark_as_read)
    store.seed([make_notification(5)])
    try:
        await store.mark_read(5)
    finally:
        await client.aclose()

    assert store.unread_count() == 0
