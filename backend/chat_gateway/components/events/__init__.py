"""Chat message types and dispatch."""

from chat_gateway.components.events.dispatcher import (
    DispatchOutcome,
    DispatchResult,
    MessageDispatcher,
)
from chat_gateway.components.events.types import ChatMessage, InboundFrame, MessageType

__all__ = [
    "DispatchOutcome",
    "DispatchResult",
    "MessageDispatcher",
    "ChatMessage",
    "InboundFrame",
    "MessageType",
]
