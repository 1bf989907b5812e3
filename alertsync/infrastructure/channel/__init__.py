"""Push channel: STOMP framing, WebSocket transport and connection lifecycle."""

from .manager import ChannelConnectionManager
from .transport import StompWebSocketTransport

__all__ = ["ChannelConnectionManager", "StompWebSocketTransport"]
