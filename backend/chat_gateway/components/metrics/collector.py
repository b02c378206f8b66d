"""
Metrics Collector for the Chat Gateway.

Centralizes counters for observability. All counters are updated from the
event loop thread; the threading lock keeps snapshots consistent when the
health endpoint is served from a worker thread.
"""

from __future__ import annotations

import threading
from dataclasses import asdict, dataclass
from typing import Any


@dataclass
class BroadcastMetrics:
    """Metrics for broadcast operations."""
    total: int = 0
    failed: int = 0
    recipients_sent: int = 0
    recipients_failed: int = 0


@dataclass
class ConnectionMetrics:
    """Metrics for connection management."""
    accepted: int = 0
    rejected_host: int = 0
    rejected_protocol: int = 0
    rejected_duplicate: int = 0
    closed: int = 0
    transport_errors: int = 0


@dataclass
class MessageMetrics:
    """Metrics for inbound frame processing."""
    received: int = 0
    parse_errors: int = 0
    unknown_type: int = 0
    empty_dropped: int = 0
    oversized: int = 0


class MetricsCollector:
    """
    Thread-safe metrics collector for the Chat Gateway.

    Usage:
        metrics = MetricsCollector()
        metrics.increment("message", "received")
        stats = metrics.get_snapshot()
    """

    def __init__(self) -> None:
        """Initialize metrics collector."""
        self._lock = threading.Lock()
        self._broadcast = BroadcastMetrics()
        self._connection = ConnectionMetrics()
        self._message = MessageMetrics()

    def _group(self, group: str) -> Any:
        groups = {
            "broadcast": self._broadcast,
            "connection": self._connection,
            "message": self._message,
        }
        try:
            return groups[group]
        except KeyError:
            raise ValueError(f"Unknown metrics group: {group}") from None

    def increment(self, group: str, name: str, count: int = 1) -> None:
        """
        Add count to a counter.

        Raises:
            ValueError: If the group is unknown.
            AttributeError: If the counter does not exist in the group.
        """
        target = self._group(group)
        with self._lock:
            setattr(target, name, getattr(target, name) + count)

    def record_broadcast(self, sent: int, failed: int) -> None:
        """Record the outcome of one broadcast."""
        with self._lock:
            self._broadcast.total += 1
            self._broadcast.recipients_sent += sent
            if failed > 0:
                self._broadcast.failed += 1
                self._broadcast.recipients_failed += failed

    def get_snapshot(self) -> dict[str, dict[str, int]]:
        """Get a copy of all counters."""
        with self._lock:
            return {
                "broadcast": asdict(self._broadcast),
                "connection": asdict(self._connection),
                "message": asdict(self._message),
            }
