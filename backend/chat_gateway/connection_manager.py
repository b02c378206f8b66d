"""
Chat Connection Manager.

Thin orchestrator that owns the connection registry and composes the
components working on it:
- ProtocolGate: Handshake admission
- ConnectionLifecycle: Accept/teardown
- MessageDispatcher: Inbound frame routing
- ConnectionBroadcaster: Fan-out to every session
- ConnectionStats: Statistics aggregation

One instance exists per application (see chat_gateway.main.create_app).
Everything runs on the event loop; registry mutations never span an await.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

from shared.config.settings import Settings, settings as default_settings
from chat_gateway.components.admission.gate import AdmissionResult, ProtocolGate
from chat_gateway.components.connection.registry import ChatSession, ConnectionRegistry
from chat_gateway.components.events.dispatcher import DispatchResult, MessageDispatcher
from chat_gateway.components.metrics.collector import MetricsCollector
from chat_gateway.core.connection import (
    ConnectionBroadcaster,
    ConnectionLifecycle,
    ConnectionStats,
)

if TYPE_CHECKING:
    from fastapi import WebSocket

__all__ = ["ConnectionManager"]


class ConnectionManager:
    """
    Manages chat connections.

    Configuration from settings:
    - allowed_hosts: Host whitelist for admission
    - chat_subprotocol: Required subprotocol
    - ws_max_message_size: Largest inbound frame relayed
    """

    def __init__(self, app_settings: Settings | None = None) -> None:
        """Initialize the connection manager with composed components."""
        self.settings = app_settings or default_settings
        self.max_message_size = self.settings.ws_max_message_size

        # Core components
        self._registry = ConnectionRegistry()
        self._metrics = MetricsCollector()
        self._gate = ProtocolGate(
            allowed_hosts=self.settings.allowed_host_list,
            subprotocol=self.settings.chat_subprotocol,
        )

        self._broadcaster = ConnectionBroadcaster(
            registry=self._registry,
            metrics=self._metrics,
        )
        self._dispatcher = MessageDispatcher(
            broadcaster=self._broadcaster,
            metrics=self._metrics,
        )
        self._lifecycle = ConnectionLifecycle(
            registry=self._registry,
            broadcaster=self._broadcaster,
            metrics=self._metrics,
        )
        self._stats = ConnectionStats(
            registry=self._registry,
            metrics=self._metrics,
        )

    # =========================================================================
    # Public properties
    # =========================================================================

    @property
    def registry(self) -> ConnectionRegistry:
        """The live session registry."""
        return self._registry

    @property
    def metrics(self) -> MetricsCollector:
        """The metrics collector."""
        return self._metrics

    @property
    def total_connections(self) -> int:
        """Total number of active connections."""
        return self._lifecycle.total_connections

    # =========================================================================
    # Admission (delegate to gate)
    # =========================================================================

    def check_admission(
        self,
        host: str | None,
        origin: str | None,
        subprotocols: list[str],
        remote: str | None = None,
    ) -> AdmissionResult:
        """Decide whether a handshake may proceed, recording rejections."""
        result = self._gate.check(host, origin, subprotocols, remote=remote)
        if not result.accepted:
            counter = (
                "rejected_host"
                if result.audit_reason == "host_not_allowed"
                else "rejected_protocol"
            )
            self._metrics.increment("connection", counter)
        return result

    # =========================================================================
    # Connection management (delegate to lifecycle)
    # =========================================================================

    async def connect(self, websocket: "WebSocket", admission: AdmissionResult) -> ChatSession:
        """Accept and register an admitted WebSocket connection."""
        return await self._lifecycle.connect(websocket, admission)

    async def disconnect(self, session: ChatSession) -> int:
        """Unregister a session and announce its departure."""
        return await self._lifecycle.disconnect(session)

    def record_transport_error(self) -> None:
        """Record a connection that ended with a transport error."""
        self._metrics.increment("connection", "transport_errors")

    def record_oversized_frame(self) -> None:
        """Record an inbound frame dropped for exceeding the size limit."""
        self._metrics.increment("message", "oversized")

    # =========================================================================
    # Messaging (delegate to dispatcher)
    # =========================================================================

    async def handle_frame(self, raw: str | bytes, session: ChatSession) -> DispatchResult:
        """Parse and route one inbound frame."""
        return await self._dispatcher.dispatch(raw, session)

    # =========================================================================
    # Statistics (delegate to stats)
    # =========================================================================

    def get_stats(self) -> dict[str, Any]:
        """Get connection statistics."""
        return self._stats.get_stats()
