"""Tests for the STOMP frame codec and the classification of broker errors."""

from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from alertsync.domain.errors import ChannelAuthenticationError, ChannelTransportError
from alertsync.infrastructure.channel.stomp import (
    Frame,
    StompProtocolError,
    connect_frame,
    decode_frames,
    encode_frame,
    subscribe_frame,
)
from alertsync.infrastructure.channel.transport import classify_error_frame


def test_connect_frame_carries_bearer_token_unescaped() -> None:
    frame = connect_frame("localhost", {"Authorization": "Bearer a:b"})

    encoded = encode_frame(frame)

    assert encoded.startswith("CONNECT\n")
    assert "Authorization:Bearer a:b\n" in encoded
    assert "accept-version:1.2,1.1,1.0\n" in encoded
    assert encoded.endswith("\n\n\x00")


def test_subscribe_frame_targets_destination() -> None:
    encoded = encode_frame(subscribe_frame("/topic/notifications/DOSAJE", "sub-0"))

    assert encoded.split("\n")[0] == "SUBSCRIBE"
    assert "destination:/topic/notifications/DOSAJE" in encoded
    assert "id:sub-0" in encoded


def test_header_values_are_escaped_outside_connect() -> None:
    encoded = encode_frame(Frame("SEND", {"note": "a:b\nc"}, "x"))

    assert "note:a\\cb\\nc" in encoded


def test_decode_message_frame_with_json_body() -> None:
    data = (
        "MESSAGE\ndestination:/topic/notifications/DOSAJE\nmessage-id:1\n"
        'subscription:sub-0\n\n{"id": 1}\x00'
    )

    (frame,) = decode_frames(data)

    assert frame.command == "MESSAGE"
    assert frame.header("destination") == "/topic/notifications/DOSAJE"
    assert frame.body == '{"id": 1}'


def test_decode_skips_heartbeats_and_splits_frames() -> None:
    data = "\n\nCONNECTED\nversion:1.2\n\n\x00\nMESSAGE\nmessage-id:2\n\nhola\x00\n"

    frames = decode_frames(data)

    assert [frame.command for frame in frames] == ["CONNECTED", "MESSAGE"]
    assert frames[1].body == "hola"


def test_decode_heartbeat_only_yields_nothing() -> None:
    assert decode_frames("\n") == []


def test_decode_unescapes_headers_and_keeps_first_repeat() -> None:
    (frame,) = decode_frames("ERROR\nmessage:bad\\ctoken\nmessage:second\n\n\x00")

    assert frame.header("message") == "bad:token"


def test_decode_honours_content_length() -> None:
    (frame,) = decode_frames("MESSAGE\ncontent-length:3\n\nabcdef\x00")

    assert frame.body == "abc"


def test_decode_rejects_unknown_commands() -> None:
    with pytest.raises(StompProtocolError):
        decode_frames("HELLO\n\n\x00")


def test_decode_rejects_invalid_escape() -> None:
    with pytest.raises(StompProtocolError):
        decode_frames("MESSAGE\nbad:\\x\n\n\x00")


@pytest.mark.parametrize(
    ("message", "expected"),
    [
        ("401 Unauthorized", ChannelAuthenticationError),
        ("Access denied", ChannelAuthenticationError),
        ("Invalid token", ChannelAuthenticationError),
        ("JWT token has expired", ChannelAuthenticationError),
        ("Bad credentials", ChannelAuthenticationError),
        ("Unexpected token in JSON at position 0", ChannelTransportError),
        ("Message tokenizer overflow", ChannelTransportError),
        ("Broker unavailable", ChannelTransportError),
    ],
)
def test_error_frames_are_classified_by_message(message, expected) -> None:
    error = classify_error_frame(Frame("ERROR", {"message": message}))

    assert type(error) is expected
    assert str(error) == message
