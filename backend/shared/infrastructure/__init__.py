"""
Infrastructure module: cross-cutting runtime support.

Provides:
- Connection correlation for log records (correlation.py)
"""

from shared.infrastructure.correlation import (
    ConnectionIdFilter,
    connection_id_var,
)

__all__ = [
    "ConnectionIdFilter",
    "connection_id_var",
]
