"""
WebSocket Context for audit logging.

Encapsulates connection request metadata for consistent audit logging.
"""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from typing import Any, TYPE_CHECKING

from chat_gateway.components.core.constants import WSConstants

if TYPE_CHECKING:
    from fastapi import WebSocket


# Control characters and Unicode direction overrides
_CONTROL_CHAR_PATTERN = re.compile(
    r'[\x00-\x1f\x7f-\x9f'  # ASCII control characters
    r'\u200b-\u200f'  # Zero-width and direction marks
    r'\u202a-\u202e'  # Bidirectional text formatting (RTL override, etc.)
    r'\u2066-\u2069'  # Isolate formatting characters
    r'\ufeff]'  # BOM / Zero-width no-break space
)


def sanitize_log_data(data: str, max_length: int = WSConstants.LOG_DATA_MAX_LENGTH) -> str:
    """
    Sanitize user-provided data before logging.

    Truncates first so escaping cannot split an escape sequence, then
    strips control characters and escapes JSON-dangerous characters.

    Args:
        data: Raw user data.
        max_length: Maximum length to include in logs.

    Returns:
        Sanitized, truncated string safe for structured logging.
    """
    truncated = data[:max_length] if len(data) > max_length else data
    was_truncated = len(data) > max_length

    # Remove control characters and direction overrides
    sanitized = _CONTROL_CHAR_PATTERN.sub('', truncated)

    # Replace backslashes first to avoid double-escaping
    sanitized = sanitized.replace('\\', '\\\\')
    sanitized = sanitized.replace('"', '\\"')

    if was_truncated:
        return sanitized + "..."
    return sanitized


@dataclass
class WebSocketContext:
    """
    Context object for WebSocket connection request metadata.

    Built from the handshake scope before the connection is accepted, so
    it is available to both the rejection and the session paths.

    Usage:
        ctx = WebSocketContext.from_websocket(websocket, "/")
        ctx.audit("REJECTED", reason="host_not_allowed")
    """

    endpoint: str
    host: str | None = None
    origin: str | None = None
    remote_host: str | None = None
    remote_port: int | None = None
    subprotocols: list[str] = field(default_factory=list)

    @classmethod
    def from_websocket(cls, websocket: "WebSocket", endpoint: str) -> "WebSocketContext":
        """
        Create context from a WebSocket handshake.

        Args:
            websocket: The (not yet accepted) WebSocket connection.
            endpoint: The endpoint path.

        Returns:
            WebSocketContext with request metadata.
        """
        client = websocket.client
        return cls(
            endpoint=endpoint,
            host=websocket.headers.get("host"),
            origin=websocket.headers.get("origin"),
            remote_host=client.host if client else None,
            remote_port=client.port if client else None,
            subprotocols=list(websocket.scope.get("subprotocols", [])),
        )

    @property
    def remote(self) -> str:
        """Remote endpoint as "address:port" for logging."""
        if self.remote_host is None:
            return "unknown"
        return f"{self.remote_host}:{self.remote_port}"

    def to_audit_dict(self, event_type: str, **extra: Any) -> dict[str, Any]:
        """
        Convert to dictionary for audit logging.

        Only includes non-None fields to reduce log noise.
        """
        result: dict[str, Any] = {
            "event_type": event_type,
            "endpoint": self.endpoint,
            "remote": self.remote,
        }
        if self.host:
            result["host"] = sanitize_log_data(self.host)
        if self.origin:
            result["origin"] = sanitize_log_data(self.origin)

        result.update(extra)
        return result

    def audit(
        self,
        event_type: str,
        logger_func: Any = None,
        **extra: Any,
    ) -> None:
        """
        Log an audit event.

        Args:
            event_type: The audit event type.
            logger_func: Optional custom logger function (default: audit_ws_connection).
            **extra: Additional fields to log.
        """
        if logger_func is None:
            from shared.config.logging import audit_ws_connection
            logger_func = audit_ws_connection

        logger_func(**self.to_audit_dict(event_type, **extra))
