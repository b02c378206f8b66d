"""
Connection Management Module.

Components composed by ConnectionManager:
- lifecycle.py: Connection accept/teardown
- broadcaster.py: Message fan-out
- stats.py: Statistics aggregation
"""

from chat_gateway.core.connection.lifecycle import ConnectionLifecycle
from chat_gateway.core.connection.broadcaster import ConnectionBroadcaster, is_ws_connected
from chat_gateway.core.connection.stats import ConnectionStats

__all__ = [
    "ConnectionLifecycle",
    "ConnectionBroadcaster",
    "ConnectionStats",
    "is_ws_connected",
]
