"""
WebSocket Endpoint Handlers.

Concrete endpoint implementations built on WebSocketEndpointBase.
"""

from __future__ import annotations

from chat_gateway.components.endpoints.base import WebSocketEndpointBase
from shared.config.logging import get_logger

logger = get_logger(__name__)


class ChatEndpoint(WebSocketEndpointBase):
    """
    WebSocket endpoint for chat clients.

    Every admitted client speaks the chat subprotocol; each inbound frame
    is handed to the manager's dispatcher, which decides whether anything
    is broadcast.
    """

    async def handle_message(self, data: str | bytes) -> None:
        result = await self.manager.handle_frame(data, self.session)
        logger.debug(
            "Frame dispatched",
            remote=self.context.remote,
            outcome=result.outcome.value,
            sent=result.sent,
        )
