"""WebSocket endpoint classes."""

from chat_gateway.components.endpoints.base import WebSocketEndpointBase
from chat_gateway.components.endpoints.handlers import ChatEndpoint

__all__ = ["WebSocketEndpointBase", "ChatEndpoint"]
