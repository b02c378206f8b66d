"""
Connection correlation for logging.

Every chat connection runs in its own task, so a context variable set at
the start of the task tags all log records emitted while serving it.
"""

from contextvars import ContextVar

# Context variable for the connection key ("address:port")
connection_id_var: ContextVar[str] = ContextVar("connection_id", default="")


class ConnectionIdFilter:
    """
    Logging filter that adds connection_id to log records.

    Usage:
        import logging
        handler = logging.StreamHandler()
        handler.addFilter(ConnectionIdFilter())
    """

    def filter(self, record) -> bool:
        record.connection_id = connection_id_var.get() or "-"
        return True
