"""Wiring of the notification engine from :class:`Settings`."""

from __future__ import annotations

import logging
from dataclasses import dataclass
from functools import partial
from typing import Callable

from sqlalchemy import Engine

from alertsync.application.ports import AlertSink, NotificationApi, SnapshotStorage, TransportFactory
from alertsync.application.session import BearerCredentials, NotificationSession
from alertsync.application.store import NotificationStore
from alertsync.application.use_cases.notifications import BacklogReconciler
from alertsync.config import Settings

from .alerts import build_alert_dispatcher
from .api_client import NotificationApiClient
from .channel import ChannelConnectionManager, StompWebSocketTransport
from .database import build_engine, build_session_factory, initialize_database
from .repositories import SnapshotRepository

logger = logging.getLogger(__name__)


@dataclass
class NotificationRuntime:
    """A wired session plus the resources that must be released on shutdown."""

    session: NotificationSession
    api: NotificationApi
    engine: Engine | None = None
    alerts: AlertSink | None = None

    async def aclose(self) -> None:
        await self.session.close()
        for resource in (self.api, self.alerts):
            closer: Callable | None = getattr(resource, "aclose", None)
            if closer is not None:
                await closer()
        if self.engine is not None:
            self.engine.dispose()


def build_runtime(
    settings: Settings,
    *,
    storage: SnapshotStorage | None = None,
    api: NotificationApi | None = None,
    transport_factory: TransportFactory | None = None,
    alerts: AlertSink | None = None,
) -> NotificationRuntime:
    """Create the store (restored from the snapshot), channel and reconciler.

    Every collaborator can be overridden, which the tests use to run without
    network or database.
    """

    credentials = BearerCredentials(settings.access_token)

    engine: Engine | None = None
    if storage is None:
        engine = build_engine(settings.snapshot_database_url)
        initialize_database(engine)
        storage = SnapshotRepository(build_session_factory(engine), key=settings.snapshot_key)

    if api is None:
        api = NotificationApiClient(
            settings.api_base_url,
            token_provider=credentials.get,
            timeout=settings.request_timeout,
        )

    if transport_factory is None:
        transport_factory = partial(StompWebSocketTransport, settings.channel_url)

    if alerts is None:
        alerts = build_alert_dispatcher(
            sound_path=settings.alert_sound_path,
            player=settings.alert_player_command,
            bell=settings.alert_bell,
        )

    store = NotificationStore.restore(
        storage,
        alerts=alerts,
        confirm_read=api.mark_as_read,
        limit=settings.notification_limit,
    )
    logger.info("Restored %s notifications from the snapshot", len(store.current_list()))

    channel = ChannelConnectionManager(
        transport_factory,
        store.push,
        token_provider=credentials.get,
        reconnect_delay=settings.reconnect_delay,
        max_reconnect_attempts=settings.max_reconnect_attempts,
    )
    session = NotificationSession(
        store,
        channel,
        BacklogReconciler(api, store),
        credentials=credentials,
        role_areas=settings.role_areas,
    )
    return NotificationRuntime(session=session, api=api, engine=engine, alerts=alerts)


__all__ = ["NotificationRuntime", "build_runtime"]
