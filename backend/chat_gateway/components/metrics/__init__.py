"""Gateway metrics."""

from chat_gateway.components.metrics.collector import MetricsCollector

__all__ = ["MetricsCollector"]
