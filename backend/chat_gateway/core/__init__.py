"""
Chat Gateway Core Module.

- connection/: Connection lifecycle, broadcasting, stats
"""

from chat_gateway.core.connection import (
    ConnectionLifecycle,
    ConnectionBroadcaster,
    ConnectionStats,
    is_ws_connected,
)

__all__ = [
    "ConnectionLifecycle",
    "ConnectionBroadcaster",
    "ConnectionStats",
    "is_ws_connected",
]
