"""
WebSocket Endpoint Base Class.

Drives one connection from handshake to teardown:

    Connecting -> Open -> Closed

A rejected handshake goes from Connecting straight to Closed without a
session ever being registered.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import TYPE_CHECKING

from fastapi import WebSocket, WebSocketDisconnect

from chat_gateway.components.admission.gate import AdmissionResult
from chat_gateway.components.core.constants import WSCloseCode
from chat_gateway.components.core.context import WebSocketContext
from chat_gateway.components.core.errors import DuplicateConnectionError
from chat_gateway.components.endpoints.mixins import (
    AdmissionMixin,
    ConnectionLifecycleMixin,
    MessageValidationMixin,
)
from shared.config.logging import get_logger
from shared.infrastructure.correlation import connection_id_var

if TYPE_CHECKING:
    from chat_gateway.components.connection.registry import ChatSession
    from chat_gateway.connection_manager import ConnectionManager

logger = get_logger(__name__)


class WebSocketEndpointBase(
    AdmissionMixin,
    MessageValidationMixin,
    ConnectionLifecycleMixin,
    ABC,
):
    """
    Base class for WebSocket endpoints.

    Uses mixins for each concern:
    - AdmissionMixin: Handshake admission and rejection
    - MessageValidationMixin: Frame size checks
    - ConnectionLifecycleMixin: Lifecycle logging

    Subclasses implement:
    - handle_message(): Process one inbound frame

    Usage:
        endpoint = ChatEndpoint(websocket, manager, "/")
        await endpoint.run()
    """

    def __init__(
        self,
        websocket: WebSocket,
        manager: "ConnectionManager",
        endpoint_name: str,
    ):
        """
        Initialize the endpoint handler.

        Args:
            websocket: The WebSocket connection.
            manager: ConnectionManager instance.
            endpoint_name: Name for logging (e.g., "/").
        """
        self.websocket = websocket
        self.manager = manager
        self.endpoint_name = endpoint_name

        self.context = WebSocketContext.from_websocket(websocket, endpoint_name)
        self.session: "ChatSession | None" = None

    @abstractmethod
    async def handle_message(self, data: str | bytes) -> None:
        """
        Handle one inbound data frame.

        Args:
            data: The frame payload, text or binary.
        """

    async def run(self) -> None:
        """
        Main entry point - run the WebSocket endpoint.

        Handles the complete lifecycle:
        1. Admission (Host whitelist, subprotocol)
        2. Accept and register
        3. Message loop
        4. Teardown on close or transport error
        """
        token = connection_id_var.set(self.context.remote)
        try:
            # Step 1: Admission
            admission = self.check_admission()
            if not admission.accepted:
                await self.reject(admission)
                return
            self.context.audit("ACCEPTED", subprotocol=admission.subprotocol)

            # Step 2: Accept and register
            if not await self._register(admission):
                return

            self.log_connect()

            # Step 3: Message loop, Step 4: Teardown
            try:
                await self._message_loop()
            except WebSocketDisconnect as e:
                self.log_disconnect("client_disconnect", code=e.code)
            except Exception as e:
                logger.error(
                    "Transport error on connection",
                    endpoint=self.endpoint_name,
                    remote=self.context.remote,
                    error=str(e),
                    exc_info=True,
                )
                self.manager.record_transport_error()
                self.log_disconnect("transport_error")
            finally:
                await self.manager.disconnect(self.session)
        finally:
            connection_id_var.reset(token)

    async def _register(self, admission: AdmissionResult) -> bool:
        """Accept the connection and register its session."""
        try:
            self.session = await self.manager.connect(self.websocket, admission)
        except ConnectionError as e:
            if isinstance(e.__cause__, DuplicateConnectionError):
                self.log_connect_rejected(str(e), event_type="DUPLICATE")
            else:
                self.log_connect_rejected(str(e))
            return False
        return True

    async def _message_loop(self) -> None:
        """
        Main message processing loop.

        Runs until the peer closes. Text and binary frames are both relayed
        to handle_message(); oversized frames are dropped.

        Raises:
            WebSocketDisconnect: When the peer closes the connection.
        """
        while True:
            message = await self.websocket.receive()
            if message["type"] == "websocket.disconnect":
                raise WebSocketDisconnect(
                    message.get("code", WSCloseCode.NORMAL), message.get("reason")
                )

            data = message.get("text")
            if data is None:
                data = message.get("bytes")
            if data is None:
                continue

            if not self.validate_message_size(data):
                continue

            await self.handle_message(data)
