"""Core constants, errors and logging context."""

from chat_gateway.components.core.constants import (
    WSCloseCode,
    WSConstants,
    validate_websocket_host,
)
from chat_gateway.components.core.context import WebSocketContext, sanitize_log_data
from chat_gateway.components.core.errors import (
    ChatGatewayError,
    DuplicateConnectionError,
    MessageParseError,
)

__all__ = [
    "WSCloseCode",
    "WSConstants",
    "validate_websocket_host",
    "WebSocketContext",
    "sanitize_log_data",
    "ChatGatewayError",
    "DuplicateConnectionError",
    "MessageParseError",
]
