"""
Chat Gateway exceptions.
"""

from __future__ import annotations

from typing import Any


class ChatGatewayError(Exception):
    """Base class for gateway errors."""


class MessageParseError(ChatGatewayError):
    """
    Inbound frame could not be decoded into a chat message.

    Recoverable: the frame is dropped and the connection stays open.
    """

    def __init__(self, reason: str, raw: Any = None) -> None:
        super().__init__(reason)
        self.reason = reason
        self.raw = raw


class DuplicateConnectionError(ChatGatewayError):
    """A session with the same connection key is already registered."""

    def __init__(self, key: Any) -> None:
        super().__init__(f"Connection {key} is already registered")
        self.key = key
