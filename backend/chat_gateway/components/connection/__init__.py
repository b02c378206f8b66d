"""Connection registry."""

from chat_gateway.components.connection.registry import (
    ChatSession,
    ConnectionKey,
    ConnectionRegistry,
)

__all__ = ["ChatSession", "ConnectionKey", "ConnectionRegistry"]
