"""STOMP-over-WebSocket implementation of the push channel transport."""

from __future__ import annotations

import itertools
import logging
import re
from typing import AsyncIterator, Mapping
from urllib.parse import urlparse

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, InvalidHandshake, InvalidStatus
from websockets.typing import Subprotocol

from alertsync.domain.errors import (
    ChannelAuthenticationError,
    ChannelError,
    ChannelTransportError,
)

from .stomp import (
    Frame,
    StompProtocolError,
    connect_frame,
    decode_frames,
    disconnect_frame,
    encode_frame,
    subscribe_frame,
)

logger = logging.getLogger(__name__)

POLICY_VIOLATION = 1008
_AUTH_STATUS_CODES = frozenset({401, 403})
_AUTH_ERROR_PATTERN = re.compile(
    r"unauthori[sz]ed|forbidden|access denied|\b40[13]\b|jwt|credential|authenticat"
    r"|(?:invalid|expired|missing|bad|revoked)\s+(?:access\s+|bearer\s+)?token"
    r"|token\s+(?:is\s+)?(?:expired|invalid|revoked)|token\s+has\s+expired",
    re.IGNORECASE,
)
_SUBPROTOCOLS = [Subprotocol("v12.stomp"), Subprotocol("v11.stomp"), Subprotocol("v10.stomp")]
_subscription_ids = itertools.count()


def classify_error_frame(frame: Frame) -> ChannelError:
    """Return the exception matching a STOMP ``ERROR`` frame."""

    message = frame.header("message") or frame.body.strip() or "STOMP error"
    if _AUTH_ERROR_PATTERN.search(message) or _AUTH_ERROR_PATTERN.search(frame.body):
        return ChannelAuthenticationError(message)
    return ChannelTransportError(message)


def classify_close(exc: ConnectionClosed) -> ChannelError:
    """Return the exception matching an abnormal WebSocket closure."""

    close = exc.rcvd or exc.sent
    code = close.code if close is not None else None
    reason = close.reason if close is not None else ""
    description = f"channel closed (code={code}, reason={reason or 'n/a'})"
    if code == POLICY_VIOLATION:
        return ChannelAuthenticationError(description)
    return ChannelTransportError(description)


class StompWebSocketTransport:
    """One STOMP session over a WebSocket connection.

    ``open`` sends ``headers`` both on the HTTP upgrade request and inside the
    ``CONNECT`` frame, then waits for ``CONNECTED``.
    """

    def __init__(self, url: str, *, open_timeout: float | None = 10.0) -> None:
        self.url = url
        self.open_timeout = open_timeout
        self._websocket: ClientConnection | None = None

    async def open(self, headers: Mapping[str, str]) -> None:
        try:
            self._websocket = await connect(
                self.url,
                additional_headers=dict(headers),
                subprotocols=_SUBPROTOCOLS,
                open_timeout=self.open_timeout,
            )
        except InvalidStatus as exc:
            status_code = exc.response.status_code
            if status_code in _AUTH_STATUS_CODES:
                raise ChannelAuthenticationError(
                    f"handshake rejected with HTTP {status_code}"
                ) from exc
            raise ChannelTransportError(f"handshake failed with HTTP {status_code}") from exc
        except (OSError, TimeoutError, InvalidHandshake) as exc:
            raise ChannelTransportError(f"could not reach {self.url}: {exc}") from exc

        host = urlparse(self.url).hostname or "localhost"
        await self._send(connect_frame(host, headers))
        while True:
            for frame in await self._receive_frames():
                if frame.command == "CONNECTED":
                    logger.debug("STOMP session established (version %s)", frame.header("version"))
                    return
                if frame.command == "ERROR":
                    raise classify_error_frame(frame)
                logger.debug("Ignoring %s frame before CONNECTED", frame.command)

    async def subscribe(self, destination: str) -> None:
        await self._send(subscribe_frame(destination, f"sub-{next(_subscription_ids)}"))

    async def messages(self) -> AsyncIterator[str]:
        websocket = self._require_websocket()
        try:
            async for data in websocket:
                try:
                    frames = decode_frames(_as_text(data))
                except StompProtocolError:
                    logger.warning("Dropping undecodable STOMP data", exc_info=True)
                    continue
                for frame in frames:
                    if frame.command == "MESSAGE":
                        yield frame.body
                    elif frame.command == "ERROR":
                        raise classify_error_frame(frame)
        except ConnectionClosed as exc:
            raise classify_close(exc) from exc

    async def close(self) -> None:
        websocket, self._websocket = self._websocket, None
        if websocket is None:
            return
        try:
            await websocket.send(encode_frame(disconnect_frame()))
        except ConnectionClosed:
            pass
        await websocket.close()

    async def _send(self, frame: Frame) -> None:
        try:
            await self._require_websocket().send(encode_frame(frame))
        except ConnectionClosed as exc:
            raise classify_close(exc) from exc

    async def _receive_frames(self) -> list[Frame]:
        try:
            data = await self._require_websocket().recv()
        except ConnectionClosed as exc:
            raise classify_close(exc) from exc
        try:
            return decode_frames(_as_text(data))
        except StompProtocolError as exc:
            raise ChannelTransportError(f"invalid handshake frame: {exc}") from exc

    def _require_websocket(self) -> ClientConnection:
        if self._websocket is None:
            raise ChannelTransportError("transport is not open")
        return self._websocket


def _as_text(data: str | bytes) -> str:
    return data.decode("utf-8", errors="replace") if isinstance(data, bytes) else data


__all__ = [
    "StompWebSocketTransport",
    "classify_close",
    "classify_error_frame",
]
