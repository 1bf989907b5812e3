"""Minimal STOMP 1.2 framing used on top of the WebSocket channel.

A frame is ``COMMAND\\n`` followed by ``name:value`` header lines, a blank
line, the body and a NUL octet. Brokers may send bare end-of-line octets as
heart-beats between frames; they carry no frame and are skipped.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Mapping

NULL = "\x00"
EOL = "\n"

CLIENT_COMMANDS = frozenset(
    {"CONNECT", "STOMP", "SEND", "SUBSCRIBE", "UNSUBSCRIBE", "ACK", "NACK", "DISCONNECT"}
)
SERVER_COMMANDS = frozenset({"CONNECTED", "MESSAGE", "RECEIPT", "ERROR"})

# Header escaping does not apply to CONNECT / CONNECTED frames.
_UNESCAPED_COMMANDS = frozenset({"CONNECT", "CONNECTED"})

_ESCAPES = {"\\": "\\\\", "\r": "\\r", "\n": "\\n", ":": "\\c"}
_UNESCAPES = {"\\": "\\", "r": "\r", "n": "\n", "c": ":"}


class StompProtocolError(ValueError):
    """Raised when data received from the broker is not a valid frame."""


@dataclass(frozen=True)
class Frame:
    command: str
    headers: Mapping[str, str] = field(default_factory=dict)
    body: str = ""

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name, default)


def encode_frame(frame: Frame) -> str:
    """Serialize ``frame`` for transmission."""

    escape = frame.command not in _UNESCAPED_COMMANDS
    lines = [frame.command]
    for name, value in frame.headers.items():
        if escape:
            name, value = _escape(name), _escape(str(value))
        lines.append(f"{name}:{value}")
    return EOL.join(lines) + EOL + EOL + frame.body + NULL


def decode_frames(data: str) -> list[Frame]:
    """Parse every frame contained in ``data`` (one WebSocket message)."""

    frames: list[Frame] = []
    for chunk in data.split(NULL):
        chunk = chunk.lstrip("\r\n")
        if not chunk:
            continue
        frames.append(_decode_frame(chunk))
    return frames


def _decode_frame(chunk: str) -> Frame:
    head, separator, body = chunk.partition(EOL + EOL)
    if not separator:
        head, separator, body = chunk.partition("\r\n\r\n")
    lines = head.replace("\r\n", EOL).split(EOL)
    command = lines[0].strip()
    if command not in SERVER_COMMANDS and command not in CLIENT_COMMANDS:
        raise StompProtocolError(f"Unknown STOMP command: {command!r}")

    unescape = command not in _UNESCAPED_COMMANDS
    headers: dict[str, str] = {}
    for line in lines[1:]:
        if not line:
            continue
        name, colon, value = line.partition(":")
        if not colon:
            raise StompProtocolError(f"Malformed STOMP header line: {line!r}")
        if unescape:
            name, value = _unescape(name), _unescape(value)
        # Repeated headers: the first occurrence wins.
        headers.setdefault(name, value)

    length = headers.get("content-length")
    if length is not None and length.isdigit():
        body = body.encode("utf-8")[: int(length)].decode("utf-8", errors="replace")
    return Frame(command=command, headers=headers, body=body)


def _escape(value: str) -> str:
    return "".join(_ESCAPES.get(char, char) for char in value)


def _unescape(value: str) -> str:
    result: list[str] = []
    iterator = iter(value)
    for char in iterator:
        if char != "\\":
            result.append(char)
            continue
        following = next(iterator, "")
        if following not in _UNESCAPES:
            raise StompProtocolError(f"Invalid escape sequence in header: {value!r}")
        result.append(_UNESCAPES[following])
    return "".join(result)


def connect_frame(host: str, headers: Mapping[str, str] | None = None) -> Frame:
    """Build the CONNECT frame; heart-beats are disabled."""

    frame_headers = {"accept-version": "1.2,1.1,1.0", "host": host, "heart-beat": "0,0"}
    frame_headers.update(headers or {})
    return Frame("CONNECT", frame_headers)


def subscribe_frame(destination: str, subscription_id: str) -> Frame:
    return Frame("SUBSCRIBE", {"id": subscription_id, "destination": destination, "ack": "auto"})


def disconnect_frame() -> Frame:
    return Frame("DISCONNECT", {})


__all__ = [
    "Frame",
    "StompProtocolError",
    "connect_frame",
    "decode_frames",
    "disconnect_frame",
    "encode_frame",
    "subscribe_frame",
]
