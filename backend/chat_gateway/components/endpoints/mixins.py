"""
WebSocket Endpoint Mixins.

Each mixin handles a single concern for WebSocket endpoints.

Mixins:
    AdmissionMixin: Handshake admission and rejection
    MessageValidationMixin: Inbound frame size checks
    ConnectionLifecycleMixin: Lifecycle logging and auditing

Usage:
    class MyEndpoint(AdmissionMixin, MessageValidationMixin, WebSocketEndpointBase):
        ...
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol

from fastapi import WebSocket
from fastapi.responses import PlainTextResponse

from shared.config.logging import get_logger

if TYPE_CHECKING:
    from chat_gateway.components.admission.gate import AdmissionResult
    from chat_gateway.components.core.context import WebSocketContext
    from chat_gateway.connection_manager import ConnectionManager

logger = get_logger(__name__)


# =============================================================================
# Protocols for mixin dependencies
# =============================================================================


class HasWebSocket(Protocol):
    """Protocol for classes with websocket attribute."""

    websocket: WebSocket
    endpoint_name: str
    context: "WebSocketContext"


class HasEndpoint(HasWebSocket, Protocol):
    """Protocol for endpoints that carry both a websocket and a manager."""

    manager: "ConnectionManager"


# =============================================================================
# AdmissionMixin
# =============================================================================


class AdmissionMixin:
    """
    Mixin for handshake admission.

    Requires:
        - self.websocket: WebSocket
        - self.manager: ConnectionManager
        - self.context: WebSocketContext
    """

    def check_admission(self: HasEndpoint) -> "AdmissionResult":
        """Ask the ProtocolGate about this handshake."""
        return self.manager.check_admission(
            host=self.context.host,
            origin=self.context.origin,
            subprotocols=self.context.subprotocols,
            remote=self.context.remote,
        )

    async def reject(self: HasWebSocket, result: "AdmissionResult") -> None:
        """
        Refuse the handshake.

        Sends an HTTP denial response (403/400) when the server supports the
        WebSocket Denial Response extension, otherwise closes before accept
        with the matching application close code.
        """
        self.context.audit("REJECTED", reason=result.audit_reason)
        try:
            await self.websocket.send_denial_response(
                PlainTextResponse(result.reason, status_code=result.status_code)
            )
        except RuntimeError:
            logger.debug("Denial response unsupported, closing instead", remote=self.context.remote)
            await self.websocket.close(code=result.close_code, reason=result.reason)


# =============================================================================
# MessageValidationMixin
# =============================================================================


class MessageValidationMixin:
    """
    Mixin for inbound frame validation.

    Requires:
        - self.manager: ConnectionManager
        - self.context: WebSocketContext
    """

    def validate_message_size(self: HasEndpoint, data: str | bytes) -> bool:
        """
        Validate frame size against the configured limit.

        Oversized frames are dropped; the connection stays open.

        Returns:
            True if the frame may be processed, False if it was dropped.
        """
        max_size = self.manager.max_message_size
        if len(data) > max_size:
            logger.warning(
                "Message size exceeded limit, frame dropped",
                endpoint=self.endpoint_name,
                remote=self.context.remote,
                size=len(data),
                max_size=max_size,
            )
            self.manager.record_oversized_frame()
            return False
        return True


# =============================================================================
# ConnectionLifecycleMixin
# =============================================================================


class ConnectionLifecycleMixin:
    """
    Mixin for connection lifecycle logging.

    Requires:
        - self.endpoint_name: str
        - self.context: WebSocketContext
    """

    def log_connect(self: HasWebSocket) -> None:
        """Log connection event."""
        logger.info("Chat client connected", **self.context.to_audit_dict("CONNECT"))
        self.context.audit("CONNECT")

    def log_disconnect(self: HasWebSocket, reason: str = "client_disconnect", **extra) -> None:
        """Log disconnection event."""
        logger.info(
            "Chat client disconnected",
            **self.context.to_audit_dict("DISCONNECT", reason=reason, **extra),
        )
        self.context.audit("DISCONNECT", reason=reason, **extra)

    def log_connect_rejected(
        self: HasWebSocket, reason: str, event_type: str = "CONNECT_REJECTED"
    ) -> None:
        """Log a connection that was admitted but could not be registered."""
        logger.warning(
            "Connection rejected",
            endpoint=self.endpoint_name,
            remote=self.context.remote,
            reason=reason,
        )
        self.context.audit(event_type, reason=reason)


__all__ = [
    "AdmissionMixin",
    "MessageValidationMixin",
    "ConnectionLifecycleMixin",
    # Protocols
    "HasWebSocket",
    "HasEndpoint",
]
