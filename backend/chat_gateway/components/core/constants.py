"""
Chat Gateway Constants.

Wire-level names shared by the client page and the gateway, plus the
close codes the gateway uses.
"""

from enum import IntEnum
from typing import Final

__all__ = [
    "WSCloseCode",
    "WSConstants",
    "MSG_CHAT_JOIN",
    "MSG_CHAT_MESSAGE",
    "MSG_CHAT_LEAVE",
    "validate_websocket_host",
]


class WSCloseCode(IntEnum):
    """
    WebSocket close codes used by the gateway.

    Standard codes (1000-1999) from RFC 6455.
    Custom codes (4000-4999) mirror the HTTP status of an admission
    rejection, for servers without the denial response extension.
    """

    # Standard codes (RFC 6455)
    NORMAL = 1000  # Normal closure
    SERVER_ERROR = 1011  # Unexpected server error

    # Custom application codes (4000-4999)
    BAD_REQUEST = 4400  # No supported subprotocol requested
    FORBIDDEN = 4403  # Host not in whitelist


class WSConstants:
    """
    Chat Gateway operational constants.

    Values marked configurable can be overridden through settings.
    """

    # Subprotocol negotiated during the handshake (configurable: chat_subprotocol)
    SUBPROTOCOL: Final[str] = "beej-chat-protocol"

    # HTTP status codes for admission rejections
    HTTP_FORBIDDEN: Final[int] = 403
    HTTP_BAD_REQUEST: Final[int] = 400

    # Maximum characters of user data echoed into logs
    LOG_DATA_MAX_LENGTH: Final[int] = 100


# Message types on the wire
MSG_CHAT_JOIN: Final[str] = "chat-join"
MSG_CHAT_MESSAGE: Final[str] = "chat-message"
MSG_CHAT_LEAVE: Final[str] = "chat-leave"


def validate_websocket_host(host: str | None, allowed_hosts: list[str]) -> bool:
    """
    Validate the Host header of a WebSocket request against the whitelist.

    The comparison is exact, port included: "localhost" and "localhost:3490"
    are distinct entries.

    Args:
        host: The Host header value, or None if not present.
        allowed_hosts: Whitelisted host[:port] values.

    Returns:
        True if host is allowed, False otherwise.
    """
    if not host:
        return False
    return host in allowed_hosts
