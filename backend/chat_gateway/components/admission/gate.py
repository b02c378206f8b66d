"""
Protocol Gate for the Chat Gateway.

Decides, before a connection is accepted, whether a WebSocket handshake may
proceed: the Host must be whitelisted and the client must offer the chat
subprotocol. The gate only decides; it never creates sessions or touches the
registry.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from chat_gateway.components.core.constants import (
    WSCloseCode,
    WSConstants,
    validate_websocket_host,
)
from shared.config.logging import get_logger

logger = get_logger(__name__)


# =============================================================================
# Result Types
# =============================================================================


@dataclass(frozen=True, slots=True)
class AdmissionResult:
    """
    Result of an admission check.

    Attributes:
        accepted: Whether the handshake may proceed.
        subprotocol: Subprotocol to echo back on acceptance.
        origin: Origin of the request, echoed back on acceptance.
        status_code: HTTP status of the rejection (403 or 400).
        close_code: WebSocket close code for servers that cannot send an
            HTTP denial response.
        reason: Human-readable rejection reason.
        audit_reason: Short reason code for audit logging.
    """

    accepted: bool
    subprotocol: str | None = None
    origin: str | None = None
    status_code: int | None = None
    close_code: int | None = None
    reason: str | None = None
    audit_reason: str | None = None

    @classmethod
    def accept(cls, subprotocol: str, origin: str | None) -> "AdmissionResult":
        """Create an acceptance."""
        return cls(accepted=True, subprotocol=subprotocol, origin=origin)

    @classmethod
    def forbidden(cls, reason: str = "Forbidden") -> "AdmissionResult":
        """Create a rejection for a host outside the whitelist."""
        return cls(
            accepted=False,
            status_code=WSConstants.HTTP_FORBIDDEN,
            close_code=WSCloseCode.FORBIDDEN,
            reason=reason,
            audit_reason="host_not_allowed",
        )

    @classmethod
    def bad_request(cls, reason: str = "Unknown protocol") -> "AdmissionResult":
        """Create a rejection for a missing subprotocol."""
        return cls(
            accepted=False,
            status_code=WSConstants.HTTP_BAD_REQUEST,
            close_code=WSCloseCode.BAD_REQUEST,
            reason=reason,
            audit_reason="unsupported_subprotocol",
        )


# =============================================================================
# Gate
# =============================================================================


class ProtocolGate:
    """
    Admission control for chat connections.

    Usage:
        gate = ProtocolGate(allowed_hosts=["localhost:3490"])
        result = gate.check(host="localhost:3490", origin=None,
                            subprotocols=["beej-chat-protocol"])
        if result.accepted:
            await websocket.accept(subprotocol=result.subprotocol)
    """

    def __init__(
        self,
        allowed_hosts: Sequence[str],
        subprotocol: str = WSConstants.SUBPROTOCOL,
    ) -> None:
        """
        Initialize the gate.

        Args:
            allowed_hosts: Whitelisted Host header values (host[:port]).
            subprotocol: The single supported subprotocol.
        """
        self._allowed_hosts = list(allowed_hosts)
        self._subprotocol = subprotocol

    @property
    def subprotocol(self) -> str:
        """The supported subprotocol identifier."""
        return self._subprotocol

    @property
    def allowed_hosts(self) -> list[str]:
        """Copy of the host whitelist."""
        return list(self._allowed_hosts)

    def check(
        self,
        host: str | None,
        origin: str | None,
        subprotocols: Sequence[str],
        remote: str | None = None,
    ) -> AdmissionResult:
        """
        Decide whether a handshake may proceed.

        The host check comes first, so a request that fails both checks is
        rejected as forbidden.

        Args:
            host: Host header of the request.
            origin: Origin header of the request.
            subprotocols: Subprotocols requested by the client, in order.
            remote: Remote endpoint, for logging only.

        Returns:
            AdmissionResult with the decision.
        """
        if not validate_websocket_host(host, self._allowed_hosts):
            logger.warning("Denying connection from host", host=host, remote=remote)
            return AdmissionResult.forbidden()

        if self._subprotocol not in subprotocols:
            logger.warning(
                "Unknown protocol requested",
                requested=list(subprotocols),
                remote=remote,
            )
            return AdmissionResult.bad_request()

        logger.info("Accepted connection", remote=remote, origin=origin)
        return AdmissionResult.accept(self._subprotocol, origin)
