"""
Connection Lifecycle Management.

Handles WebSocket connection acceptance and teardown.

State machine per connection: Connecting -> Open -> Closed. A rejected
handshake goes straight from Connecting to Closed and never reaches this
module.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING

from chat_gateway.components.connection.registry import ChatSession, ConnectionKey
from chat_gateway.components.core.constants import WSCloseCode
from chat_gateway.components.core.errors import DuplicateConnectionError
from chat_gateway.components.events.types import ChatMessage
from shared.config.logging import get_logger

if TYPE_CHECKING:
    from fastapi import WebSocket
    from chat_gateway.components.admission.gate import AdmissionResult
    from chat_gateway.components.connection.registry import ConnectionRegistry
    from chat_gateway.components.metrics.collector import MetricsCollector
    from chat_gateway.core.connection.broadcaster import ConnectionBroadcaster

logger = get_logger(__name__)


class ConnectionLifecycle:
    """
    Manages the lifecycle of chat connections.

    Responsibilities:
    - Accept admitted connections and register their sessions
    - Tear sessions down exactly once and announce the departure
    """

    def __init__(
        self,
        registry: "ConnectionRegistry",
        broadcaster: "ConnectionBroadcaster",
        metrics: "MetricsCollector",
        accept_timeout: float = 5.0,
    ) -> None:
        """
        Initialize lifecycle manager with dependencies.

        Args:
            registry: Live sessions.
            broadcaster: Announces departures.
            metrics: Collects connection metrics.
            accept_timeout: Timeout for completing the WebSocket accept.
        """
        self._registry = registry
        self._broadcaster = broadcaster
        self._metrics = metrics
        self._accept_timeout = accept_timeout

    @property
    def total_connections(self) -> int:
        """Current number of registered sessions."""
        return len(self._registry)

    async def connect(
        self,
        websocket: "WebSocket",
        admission: "AdmissionResult",
    ) -> ChatSession:
        """
        Accept an admitted WebSocket and register its session.

        Args:
            websocket: The WebSocket to accept.
            admission: Accepting decision from the ProtocolGate.

        Returns:
            The registered session.

        Raises:
            ConnectionError: If the accept fails or the connection key is
                already registered.
        """
        try:
            key = ConnectionKey.from_websocket(websocket)
        except ValueError as e:
            raise ConnectionError(str(e)) from e

        # The client origin, when sent, is echoed back on the accept response
        headers = None
        if admission.origin:
            headers = [(b"sec-websocket-origin", admission.origin.encode("latin-1"))]

        try:
            await asyncio.wait_for(
                websocket.accept(subprotocol=admission.subprotocol, headers=headers),
                timeout=self._accept_timeout,
            )
        except asyncio.TimeoutError:
            raise ConnectionError("WebSocket accept timed out")
        except Exception as e:
            raise ConnectionError(f"WebSocket accept failed: {e}") from e

        session = ChatSession(key=key, websocket=websocket, origin=admission.origin)
        try:
            self._registry.insert(key, session)
        except DuplicateConnectionError as e:
            self._metrics.increment("connection", "rejected_duplicate")
            await websocket.close(code=WSCloseCode.SERVER_ERROR, reason="Duplicate connection")
            raise ConnectionError(str(e)) from e

        self._metrics.increment("connection", "accepted")
        return session

    async def disconnect(self, session: ChatSession) -> int:
        """
        Tear down a session and broadcast its departure.

        The registry entry is removed before the first await, so no
        broadcast can observe a half-removed session. Calling this twice for
        the same session is a no-op the second time.

        Args:
            session: The session to tear down.

        Returns:
            Number of remaining connections that received the leave notice.
        """
        if self._registry.get(session.key) is not session:
            return 0

        username = session.username
        self._registry.remove(session.key)
        self._metrics.increment("connection", "closed")

        return await self._broadcaster.broadcast(ChatMessage.leave(username))
