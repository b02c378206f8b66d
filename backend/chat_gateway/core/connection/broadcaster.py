"""
Connection Broadcaster.

Sends one chat message to every registered session.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from starlette.websockets import WebSocketState

from shared.config.logging import get_logger

if TYPE_CHECKING:
    from fastapi import WebSocket
    from chat_gateway.components.connection.registry import ChatSession, ConnectionRegistry
    from chat_gateway.components.events.types import ChatMessage
    from chat_gateway.components.metrics.collector import MetricsCollector

logger = get_logger(__name__)


def is_ws_connected(ws: "WebSocket") -> bool:
    """
    Check if WebSocket is in connected state before sending.

    Starlette does not expose transitional states, so a connection may
    still look connected briefly after its peer started closing.
    """
    return (
        ws.client_state == WebSocketState.CONNECTED
        and ws.application_state == WebSocketState.CONNECTED
    )


class ConnectionBroadcaster:
    """
    Fan-out of outbound messages.

    The message is serialized once per broadcast and the same text is sent
    to every recipient, the originating connection included. Sends run
    concurrently and are isolated: a failing recipient is logged and counted
    but neither stops delivery to the others nor gets closed here (its own
    receive loop notices the broken transport and tears it down).
    """

    def __init__(
        self,
        registry: "ConnectionRegistry",
        metrics: "MetricsCollector",
    ) -> None:
        """
        Initialize broadcaster with dependencies.

        Args:
            registry: Live sessions to deliver to.
            metrics: Collects broadcast metrics.
        """
        self._registry = registry
        self._metrics = metrics

    async def _send_to_session(self, session: "ChatSession", text: str) -> bool:
        """
        Send pre-serialized text to a single session.

        Returns:
            True if sent successfully, False otherwise.
        """
        if not is_ws_connected(session.websocket):
            logger.debug("Skipping recipient that is not connected", connection=str(session.key))
            return False
        try:
            await session.websocket.send_text(text)
            return True
        except Exception as e:
            logger.debug("Send failed", connection=str(session.key), error=str(e))
            return False

    async def broadcast(self, message: "ChatMessage") -> int:
        """
        Deliver message to every registered session.

        Args:
            message: Fully-formed outbound message.

        Returns:
            Number of sessions that received the message.
        """
        # Snapshot: sessions joining or leaving mid-broadcast don't affect this call
        recipients = self._registry.sessions()
        if not recipients:
            self._metrics.record_broadcast(sent=0, failed=0)
            return 0

        text = message.to_json()
        results = await asyncio.gather(
            *[self._send_to_session(session, text) for session in recipients],
            return_exceptions=True,
        )

        sent = 0
        failed = 0
        for session, result in zip(recipients, results):
            if result is True:
                sent += 1
            else:
                failed += 1
                if isinstance(result, BaseException):
                    logger.debug(
                        "Broadcast send exception",
                        connection=str(session.key),
                        error=str(result),
                    )

        self._metrics.record_broadcast(sent=sent, failed=failed)
        if failed > 0:
            logger.warning(
                "Broadcast completed with failures",
                message_type=message.type.value,
                sent=sent,
                failed=failed,
                total=len(recipients),
            )
        else:
            logger.debug(
                "Broadcast completed",
                message_type=message.type.value,
                sent=sent,
            )

        return sent
