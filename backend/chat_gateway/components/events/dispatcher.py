"""
Message Dispatcher - Routes inbound chat frames to their handlers.

Usage:
    dispatcher = MessageDispatcher(broadcaster, metrics)
    result = await dispatcher.dispatch(raw_frame, session)
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Awaitable, Callable, Protocol, TYPE_CHECKING

from chat_gateway.components.core.context import sanitize_log_data
from chat_gateway.components.core.errors import MessageParseError
from chat_gateway.components.events.types import ChatMessage, InboundFrame, MessageType
from shared.config.logging import get_logger

if TYPE_CHECKING:
    from chat_gateway.components.connection.registry import ChatSession
    from chat_gateway.components.metrics.collector import MetricsCollector

logger = get_logger(__name__)


class BroadcasterProtocol(Protocol):
    """Protocol for the broadcaster to avoid circular imports."""

    async def broadcast(self, message: ChatMessage) -> int: ...


class DispatchOutcome(str, Enum):
    """What happened to an inbound frame."""

    BROADCAST = "broadcast"
    EMPTY = "empty"
    PARSE_ERROR = "parse_error"
    UNKNOWN_TYPE = "unknown_type"


@dataclass
class DispatchResult:
    """Result of dispatching one frame."""

    outcome: DispatchOutcome
    message_type: str | None = None
    sent: int = 0
    error: str | None = None

    @property
    def broadcasted(self) -> bool:
        """Whether the frame produced a broadcast."""
        return self.outcome is DispatchOutcome.BROADCAST


Handler = Callable[[InboundFrame, "ChatSession"], Awaitable[DispatchResult]]


class MessageDispatcher:
    """
    Parses inbound frames and routes them by type.

    Before routing, the session's username is refreshed from any frame that
    carries one. This is how clients rename themselves: there is no separate
    rename message, every frame restates the current name.
    """

    def __init__(
        self,
        broadcaster: BroadcasterProtocol,
        metrics: "MetricsCollector",
    ) -> None:
        """
        Initialize dispatcher.

        Args:
            broadcaster: Delivers outbound messages to all sessions.
            metrics: Collects frame processing metrics.
        """
        self._broadcaster = broadcaster
        self._metrics = metrics
        self._handlers: dict[str, Handler] = {
            MessageType.JOIN.value: self._handle_join,
            MessageType.MESSAGE.value: self._handle_chat,
        }

    async def dispatch(self, raw: str | bytes, session: "ChatSession") -> DispatchResult:
        """
        Parse a frame and route it.

        Malformed frames and unknown types are logged and dropped; nothing
        is raised to the caller so the connection stays open.

        Args:
            raw: Frame contents as received.
            session: Session that received the frame.

        Returns:
            DispatchResult describing what happened.
        """
        self._metrics.increment("message", "received")
        session.messages_received += 1

        try:
            frame = InboundFrame.parse(raw)
        except MessageParseError as e:
            self._metrics.increment("message", "parse_errors")
            logger.warning(
                "Dropping malformed frame",
                connection=str(session.key),
                error=e.reason,
            )
            return DispatchResult(outcome=DispatchOutcome.PARSE_ERROR, error=e.reason)

        self.store_username(frame, session)

        logger.info(
            "Message received",
            connection=str(session.key),
            message_type=sanitize_log_data(frame.type),
        )

        handler = self._handlers.get(frame.type)
        if handler is None:
            self._metrics.increment("message", "unknown_type")
            logger.info(
                "Unknown message type",
                connection=str(session.key),
                message_type=sanitize_log_data(frame.type),
            )
            return DispatchResult(outcome=DispatchOutcome.UNKNOWN_TYPE, message_type=frame.type)

        try:
            return await handler(frame, session)
        except MessageParseError as e:
            self._metrics.increment("message", "parse_errors")
            logger.warning(
                "Dropping frame with invalid payload",
                connection=str(session.key),
                message_type=frame.type,
                error=e.reason,
            )
            return DispatchResult(
                outcome=DispatchOutcome.PARSE_ERROR,
                message_type=frame.type,
                error=e.reason,
            )

    @staticmethod
    def store_username(frame: InboundFrame, session: "ChatSession") -> None:
        """Overwrite the session's username if the frame carries one."""
        username = frame.username
        if username is not None and username != session.username:
            logger.debug(
                "Username updated",
                connection=str(session.key),
                username=sanitize_log_data(username),
            )
            session.username = username

    async def _handle_join(self, frame: InboundFrame, session: "ChatSession") -> DispatchResult:
        """Announce the new participant to everyone."""
        message = ChatMessage.join(frame.text_field("username"))
        sent = await self._broadcaster.broadcast(message)
        return DispatchResult(
            outcome=DispatchOutcome.BROADCAST,
            message_type=frame.type,
            sent=sent,
        )

    async def _handle_chat(self, frame: InboundFrame, session: "ChatSession") -> DispatchResult:
        """Relay a chat line; blank lines are dropped silently."""
        text = frame.text_field("message")
        username = frame.text_field("username")

        if text == "":
            self._metrics.increment("message", "empty_dropped")
            return DispatchResult(outcome=DispatchOutcome.EMPTY, message_type=frame.type)

        sent = await self._broadcaster.broadcast(ChatMessage.chat(username, text))
        return DispatchResult(
            outcome=DispatchOutcome.BROADCAST,
            message_type=frame.type,
            sent=sent,
        )
