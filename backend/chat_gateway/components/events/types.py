"""
Chat message value objects.

Every frame on the wire is a UTF-8 JSON object {"type": str, "payload": {...}}.
InboundFrame is what a client sent (validated only structurally, since the
type decides which payload fields matter); ChatMessage is what the gateway
broadcasts.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any, Self

from chat_gateway.components.core.constants import (
    MSG_CHAT_JOIN,
    MSG_CHAT_LEAVE,
    MSG_CHAT_MESSAGE,
)
from chat_gateway.components.core.errors import MessageParseError


class MessageType(str, Enum):
    """Message types of the chat protocol."""

    JOIN = MSG_CHAT_JOIN
    MESSAGE = MSG_CHAT_MESSAGE
    # Synthesized by the gateway on disconnect; never accepted from clients
    LEAVE = MSG_CHAT_LEAVE


# Characters trimmed from usernames and chat lines: Unicode whitespace,
# line terminators and the BOM. ASCII separators \x1c-\x1f and NEL are kept.
TRIM_CHARS: str = (
    "\t\n\v\f\r \u00a0\u1680"
    "\u2000\u2001\u2002\u2003\u2004\u2005\u2006\u2007\u2008\u2009\u200a"
    "\u2028\u2029\u202f\u205f\u3000\ufeff"
)


def trim(value: str) -> str:
    """Strip leading and trailing TRIM_CHARS."""
    return value.strip(TRIM_CHARS)


@dataclass(frozen=True, slots=True)
class InboundFrame:
    """
    A decoded client frame.

    Attributes:
        type: Value of the "type" field (possibly unknown).
        payload: The "payload" object (empty if absent).
    """

    type: str
    payload: MappingProxyType = field(default_factory=lambda: MappingProxyType({}))

    @classmethod
    def parse(cls, raw: str | bytes) -> Self:
        """
        Decode a text (or UTF-8 binary) frame.

        Raises:
            MessageParseError: If the frame is not a JSON object with a string
                "type" and an object "payload".
        """
        if isinstance(raw, bytes):
            try:
                raw = raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise MessageParseError(f"Frame is not valid UTF-8: {exc}") from exc

        try:
            data = json.loads(raw)
        except (ValueError, RecursionError) as exc:
            # ValueError covers JSONDecodeError and the int digit limit;
            # RecursionError comes from deeply nested arrays or objects
            raise MessageParseError(f"Invalid JSON frame: {exc}", raw=raw) from exc

        if not isinstance(data, dict):
            raise MessageParseError("Frame must be a JSON object", raw=raw)

        msg_type = data.get("type")
        if not isinstance(msg_type, str):
            raise MessageParseError("Frame has no string 'type'", raw=raw)

        payload = data.get("payload", {})
        if payload is None:
            payload = {}
        if not isinstance(payload, dict):
            raise MessageParseError("Frame 'payload' must be an object", raw=raw)

        return cls(type=msg_type, payload=MappingProxyType(payload))

    @property
    def username(self) -> str | None:
        """
        Trimmed username carried by the payload, if it carries one.

        A missing, empty or non-string username counts as "not carried".
        """
        value = self.payload.get("username")
        if isinstance(value, str) and value:
            return trim(value)
        return None

    def text_field(self, name: str) -> str:
        """
        Get a string payload field, trimmed.

        A missing field reads as "".

        Raises:
            MessageParseError: If the field is present but not a string.
        """
        value = self.payload.get(name)
        if value is None:
            return ""
        if not isinstance(value, str):
            raise MessageParseError(
                f"Payload field '{name}' must be a string, got {type(value).__name__}"
            )
        return trim(value)


@dataclass(frozen=True, slots=True)
class ChatMessage:
    """
    Outbound message, broadcast to every connection.

    Build through the named constructors so payloads always have the
    protocol's shape.
    """

    type: MessageType
    payload: dict[str, Any]

    @classmethod
    def join(cls, username: str) -> Self:
        """Announce a new participant."""
        return cls(type=MessageType.JOIN, payload={"username": username})

    @classmethod
    def chat(cls, username: str, message: str) -> Self:
        """Relay a chat line."""
        return cls(type=MessageType.MESSAGE, payload={"username": username, "message": message})

    @classmethod
    def leave(cls, username: str | None) -> Self:
        """Announce a departure; username is None if it was never announced."""
        return cls(type=MessageType.LEAVE, payload={"username": username})

    def to_dict(self) -> dict[str, Any]:
        """Convert to the wire dictionary."""
        return {"type": self.type.value, "payload": dict(self.payload)}

    def to_json(self) -> str:
        """Serialize to compact JSON text, keeping non-ASCII as UTF-8."""
        return json.dumps(self.to_dict(), separators=(",", ":"), ensure_ascii=False)
