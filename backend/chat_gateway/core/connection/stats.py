"""
Connection Statistics.

Aggregates registry and metrics state for the health endpoint.
"""

from __future__ import annotations

from typing import Any, TYPE_CHECKING

if TYPE_CHECKING:
    from chat_gateway.components.connection.registry import ConnectionRegistry
    from chat_gateway.components.metrics.collector import MetricsCollector


class ConnectionStats:
    """Read-only view over gateway state."""

    def __init__(
        self,
        registry: "ConnectionRegistry",
        metrics: "MetricsCollector",
    ) -> None:
        self._registry = registry
        self._metrics = metrics

    def get_stats(self) -> dict[str, Any]:
        """Current connection counts plus all counters."""
        return {
            "connections": len(self._registry),
            "named_users": len(self._registry.usernames()),
            "metrics": self._metrics.get_snapshot(),
        }
