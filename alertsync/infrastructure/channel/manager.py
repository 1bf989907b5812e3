"""Lifecycle management of the live subscription to the push channel."""

from __future__ import annotations

import asyncio
import logging
from typing import Callable

from alertsync.application.ports import ChannelTransport, TokenProvider, TransportFactory
from alertsync.domain.entities import (
    ConnectionState,
    FailureKind,
    Notification,
    normalize_area,
    topic_for_area,
)
from alertsync.domain.errors import (
    ChannelAuthenticationError,
    ChannelError,
    ChannelTransportError,
    MalformedPayloadError,
)
from alertsync.infrastructure.notifications.codec import parse_notification

logger = logging.getLogger(__name__)

_ACTIVE_STATES = frozenset(
    {ConnectionState.CONNECTING, ConnectionState.CONNECTED, ConnectionState.FAILED}
)


class ChannelConnectionManager:
    """Own at most one live subscription, keyed by area.

    ``connect`` and ``disconnect`` never block: the session runs as a task on
    the running event loop. Each call bumps a generation counter and a session
    only touches the manager state while its generation is current, so a
    handshake completing after a newer ``connect``/``disconnect`` is discarded.
    """

    def __init__(
        self,
        transport_factory: TransportFactory,
        on_notification: Callable[[Notification], None],
        *,
        token_provider: TokenProvider | None = None,
        reconnect_delay: float = 5.0,
        max_reconnect_attempts: int = 0,
    ) -> None:
        self._transport_factory = transport_factory
        self._on_notification = on_notification
        self._token_provider = token_provider
        self._reconnect_delay = reconnect_delay
        self._max_reconnect_attempts = max_reconnect_attempts

        self._state = ConnectionState.DISCONNECTED
        self._area: str | None = None
        self._last_failure: FailureKind | None = None
        self._auth_blocked = False
        self._rejected_token: str | None = None
        self._generation = 0
        self._task: asyncio.Task[None] | None = None

    @property
    def state(self) -> ConnectionState:
        return self._state

    @property
    def area(self) -> str | None:
        return self._area

    @property
    def last_failure(self) -> FailureKind | None:
        return self._last_failure

    def connect(self, area: str) -> None:
        """Start (or keep) the subscription for ``area``.

        Must be called from the event loop. A session for a different area is
        torn down first; the same area being active makes this a no-op.
        """

        area_key = normalize_area(area)
        if not area_key:
            raise ValueError("area must not be empty")

        if self._area == area_key and self._state in _ACTIVE_STATES:
            logger.debug("Channel for area %s already active", area_key)
            return

        token = self._current_token()
        if self._auth_blocked and token == self._rejected_token:
            logger.error(
                "Not connecting to area %s: the current credentials were rejected; "
                "refresh the access token first",
                area_key,
            )
            return

        loop = asyncio.get_running_loop()
        self._teardown()
        generation = self._generation
        self._area = area_key
        self._state = ConnectionState.CONNECTING
        self._last_failure = None
        self._task = loop.create_task(
            self._run(generation, area_key), name=f"notification-channel-{area_key}"
        )

    def disconnect(self) -> None:
        """Tear the subscription down; safe to call in any state."""

        if self._task is None and self._state is ConnectionState.DISCONNECTED:
            return
        self._teardown()
        logger.info("Notification channel disconnected")

    async def shutdown(self) -> None:
        """Disconnect and wait for the session task to release its transport."""

        task = self._task
        self.disconnect()
        if task is not None:
            await asyncio.gather(task, return_exceptions=True)

    def _teardown(self) -> None:
        self._generation += 1
        task, self._task = self._task, None
        if task is not None and not task.done():
            task.cancel()
        self._state = ConnectionState.DISCONNECTED
        self._area = None

    def _is_current(self, generation: int) -> bool:
        return generation == self._generation

    def _current_token(self) -> str | None:
        return self._token_provider() if self._token_provider else None

    async def _run(self, generation: int, area: str) -> None:
        topic = topic_for_area(area)
        attempts = 0
        while True:
            token = self._current_token()
            transport = self._transport_factory()
            try:
                await self._open(transport, token)
                if not self._is_current(generation):
                    logger.info("Discarding stale handshake for area %s", area)
                    return
                await transport.subscribe(topic)
                if not self._is_current(generation):
                    return
                self._state = ConnectionState.CONNECTED
                attempts = 0
                logger.info("Subscribed to %s", topic)

                async for body in transport.messages():
                    if not self._is_current(generation):
                        return
                    self._handle_message(body)
                raise ChannelTransportError("channel closed by the server")
            except ChannelAuthenticationError as exc:
                if not self._is_current(generation):
                    return
                logger.error("Notification channel rejected the credentials for %s: %s", area, exc)
                self._auth_blocked = True
                self._rejected_token = token
                self._fail(FailureKind.AUTHENTICATION)
                return
            except ChannelError as exc:
                if not self._is_current(generation):
                    return
                logger.warning("Notification channel for %s failed: %s", area, exc)
            except Exception:
                if not self._is_current(generation):
                    return
                logger.exception("Unexpected failure on the notification channel for %s", area)
            finally:
                await self._close_transport(transport)

            attempts += 1
            if self._reconnect_delay <= 0 or (
                self._max_reconnect_attempts and attempts > self._max_reconnect_attempts
            ):
                self._fail(FailureKind.TRANSPORT)
                return

            self._state = ConnectionState.FAILED
            self._last_failure = FailureKind.TRANSPORT
            await asyncio.sleep(self._reconnect_delay)
            if not self._is_current(generation):
                return
            logger.info("Reconnecting to %s (attempt %s)", topic, attempts)
            self._state = ConnectionState.CONNECTING

    async def _open(self, transport: ChannelTransport, token: str | None) -> None:
        headers = {"Authorization": f"Bearer {token}"} if token else {}
        await transport.open(headers)
        self._auth_blocked = False
        self._rejected_token = None

    def _fail(self, kind: FailureKind) -> None:
        self._last_failure = kind
        self._state = ConnectionState.DISCONNECTED
        self._area = None
        self._task = None

    def _handle_message(self, body: str) -> None:
        try:
            notification = parse_notification(body)
        except MalformedPayloadError:
            logger.warning("Dropping malformed notification payload: %.200s", body)
            return
        try:
            self._on_notification(notification)
        except Exception:
            logger.exception("Failed to handle notification %s", notification.id)

    @staticmethod
    async def _close_transport(transport: ChannelTransport) -> None:
        try:
            await transport.close()
        except Exception:
            logger.debug("Error while closing the channel transport", exc_info=True)


__all__ = ["ChannelConnectionManager"]
