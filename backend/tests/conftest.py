"""
Pytest configuration and fixtures for chat gateway tests.
"""

import itertools
import time

import pytest
from fastapi.testclient import TestClient
from starlette.websockets import WebSocketState
from unittest.mock import AsyncMock, MagicMock

from shared.config.settings import Settings
from chat_gateway.components.connection.registry import ChatSession, ConnectionKey
from chat_gateway.main import create_app


CHAT_URL = "ws://localhost:3490/"
SUBPROTOCOL = "beej-chat-protocol"


class UniqueClientAddress:
    """
    ASGI wrapper that gives every WebSocket connection its own remote port.

    TestClient reports the same client address for every connection, which
    would make all test clients share one connection key.
    """

    def __init__(self, app, host: str = "127.0.0.1", first_port: int = 50000):
        self.app = app
        self.host = host
        self._ports = itertools.count(first_port)

    async def __call__(self, scope, receive, send):
        if scope["type"] == "websocket":
            scope = dict(scope, client=(self.host, next(self._ports)))
        await self.app(scope, receive, send)


def wait_for_connections(manager, expected: int, timeout: float = 2.0) -> None:
    """Block until the manager has registered the expected number of sessions."""
    deadline = time.monotonic() + timeout
    while manager.total_connections != expected:
        if time.monotonic() > deadline:
            raise AssertionError(
                f"expected {expected} connections, have {manager.total_connections}"
            )
        time.sleep(0.01)


@pytest.fixture
def chat_settings():
    """Settings with an explicit whitelist and a small frame limit."""
    return Settings(
        environment="testing",
        debug=False,
        allowed_hosts="localhost,localhost:3490",
        ws_max_message_size=1024,
        static_dir="",
    )


@pytest.fixture
def chat_app(chat_settings):
    """A fresh application with its own connection manager."""
    return create_app(chat_settings)


@pytest.fixture
def manager(chat_app):
    """The application's connection manager."""
    return chat_app.state.manager


@pytest.fixture
def client(chat_app):
    """Test client whose WebSocket connections get distinct remote ports."""
    with TestClient(UniqueClientAddress(chat_app)) as test_client:
        yield test_client


# =============================================================================
# Mock WebSockets for unit tests
# =============================================================================


def make_websocket(host: str = "127.0.0.1", port: int = 50000, connected: bool = True):
    """Create a mock WebSocket with a remote endpoint and async send/accept/close."""
    ws = MagicMock()
    ws.client = MagicMock(host=host, port=port)
    state = WebSocketState.CONNECTED if connected else WebSocketState.DISCONNECTED
    ws.client_state = state
    ws.application_state = state
    ws.accept = AsyncMock()
    ws.send_text = AsyncMock()
    ws.close = AsyncMock()
    return ws


def make_session(port: int = 50000, username: str | None = None, **ws_kwargs) -> ChatSession:
    """Create a ChatSession backed by a mock WebSocket."""
    ws = make_websocket(port=port, **ws_kwargs)
    return ChatSession(
        key=ConnectionKey("127.0.0.1", port),
        websocket=ws,
        username=username,
    )
