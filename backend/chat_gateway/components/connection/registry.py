"""
Connection Registry - the set of live chat sessions.

Maps a connection key (remote address + port) to the session state of that
connection. It is the sole source of truth for "who is connected": a key is
present exactly while its connection is open and has been accepted.

Mutations happen on the event loop without intervening awaits (insert on
accept, remove on teardown), so no locking is required.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Callable, Iterator, TYPE_CHECKING

from chat_gateway.components.core.errors import DuplicateConnectionError
from shared.config.logging import get_logger

if TYPE_CHECKING:
    from fastapi import WebSocket

logger = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class ConnectionKey:
    """
    Identity of a connection: the remote endpoint.

    Local address and port are the same for every connection on this
    listener, so they are left out. Kept as a structured value rather than
    a concatenated string so "10.0.0.1" + "23" cannot collide with
    "10.0.0.12" + "3".
    """

    host: str
    port: int

    @classmethod
    def from_websocket(cls, websocket: "WebSocket") -> "ConnectionKey":
        """
        Derive the key from the transport's remote endpoint.

        Raises:
            ValueError: If the server did not report a client address.
        """
        client = websocket.client
        if client is None:
            raise ValueError("WebSocket has no remote endpoint")
        return cls(host=client.host, port=client.port)

    def __str__(self) -> str:
        if ":" in self.host:
            return f"[{self.host}]:{self.port}"
        return f"{self.host}:{self.port}"


@dataclass(eq=False)
class ChatSession:
    """
    Per-connection mutable state.

    username starts unset and is overwritten by every inbound message that
    carries one (there is no dedicated rename message).
    """

    key: ConnectionKey
    websocket: "WebSocket"
    origin: str | None = None
    username: str | None = None
    messages_received: int = field(default=0)


class ConnectionRegistry:
    """
    Mapping of ConnectionKey -> ChatSession.

    Sessions are stored and handed out by reference; the registry owns the
    mapping, not the sessions' sockets.
    """

    def __init__(self) -> None:
        """Initialize an empty registry."""
        self._sessions: dict[ConnectionKey, ChatSession] = {}

    @property
    def sessions_by_key(self) -> MappingProxyType[ConnectionKey, ChatSession]:
        """Registered sessions (immutable view)."""
        return MappingProxyType(self._sessions)

    def insert(self, key: ConnectionKey, session: ChatSession) -> None:
        """
        Register a session under its connection key.

        Raises:
            DuplicateConnectionError: If the key is already registered.
        """
        if key in self._sessions:
            raise DuplicateConnectionError(key)
        self._sessions[key] = session
        logger.debug("Session registered", connection=str(key), total=len(self._sessions))

    def remove(self, key: ConnectionKey) -> ChatSession | None:
        """
        Unregister a session.

        Removing an absent key is a no-op: the connection may never have
        completed the accept path.

        Returns:
            The removed session, or None if the key was not registered.
        """
        session = self._sessions.pop(key, None)
        if session is not None:
            logger.debug("Session unregistered", connection=str(key), total=len(self._sessions))
        return session

    def get(self, key: ConnectionKey) -> ChatSession | None:
        """Get the session registered under key, if any."""
        return self._sessions.get(key)

    def sessions(self) -> list[ChatSession]:
        """Snapshot of all registered sessions."""
        return list(self._sessions.values())

    def for_each(self, callback: Callable[[ChatSession], None]) -> None:
        """Call callback for every registered session (over a snapshot)."""
        for session in self.sessions():
            callback(session)

    def usernames(self) -> list[str]:
        """Usernames of sessions that have announced one."""
        return [s.username for s in self._sessions.values() if s.username]

    def __contains__(self, key: object) -> bool:
        return key in self._sessions

    def __len__(self) -> int:
        return len(self._sessions)

    def __iter__(self) -> Iterator[ChatSession]:
        return iter(self.sessions())
