"""
Tests for handshake admission.

Tests verify:
- Host whitelist is exact, port included
- Subprotocol must be among those offered, in any position
- Host is checked before subprotocol
"""

import pytest

from chat_gateway.components.admission.gate import AdmissionResult, ProtocolGate
from chat_gateway.components.core.constants import WSCloseCode, validate_websocket_host

SUBPROTOCOL = "beej-chat-protocol"
ALLOWED = ["localhost", "localhost:3490", "goat:3490", "192.168.1.2:3490"]


@pytest.fixture
def gate():
    return ProtocolGate(allowed_hosts=ALLOWED, subprotocol=SUBPROTOCOL)


class TestValidateWebsocketHost:
    """Tests for validate_websocket_host."""

    @pytest.mark.parametrize("host", ALLOWED)
    def test_whitelisted_hosts(self, host):
        assert validate_websocket_host(host, ALLOWED) is True

    @pytest.mark.parametrize("host", [None, "", "evil.example", "localhost:8080", "goat", "LOCALHOST:3490"])
    def test_other_hosts(self, host):
        assert validate_websocket_host(host, ALLOWED) is False


class TestProtocolGate:
    """Tests for ProtocolGate.check."""

    def test_accepts_whitelisted_host_with_subprotocol(self, gate):
        result = gate.check("localhost:3490", "http://localhost:3490", [SUBPROTOCOL])

        assert result.accepted is True
        assert result.subprotocol == SUBPROTOCOL
        assert result.origin == "http://localhost:3490"

    def test_rejects_unknown_host_with_403(self, gate):
        result = gate.check("evil.example:3490", None, [SUBPROTOCOL])

        assert result.accepted is False
        assert result.status_code == 403
        assert result.close_code == WSCloseCode.FORBIDDEN
        assert result.audit_reason == "host_not_allowed"

    def test_rejects_missing_host(self, gate):
        assert gate.check(None, None, [SUBPROTOCOL]).status_code == 403

    def test_rejects_missing_subprotocol_with_400(self, gate):
        result = gate.check("localhost:3490", None, [])

        assert result.accepted is False
        assert result.status_code == 400
        assert result.close_code == WSCloseCode.BAD_REQUEST
        assert result.reason == "Unknown protocol"

    def test_rejects_other_subprotocols(self, gate):
        assert gate.check("localhost:3490", None, ["chat", "xmpp"]).status_code == 400

    def test_examines_every_offered_subprotocol(self, gate):
        """The supported subprotocol need not be the first one offered."""
        result = gate.check("localhost:3490", None, ["chat", SUBPROTOCOL])
        assert result.accepted is True
        assert result.subprotocol == SUBPROTOCOL

    def test_host_checked_before_subprotocol(self, gate):
        assert gate.check("evil.example", None, []).status_code == 403

    def test_custom_subprotocol(self):
        gate = ProtocolGate(allowed_hosts=["localhost"], subprotocol="other-chat")
        assert gate.check("localhost", None, ["other-chat"]).accepted is True
        assert gate.check("localhost", None, [SUBPROTOCOL]).accepted is False

    def test_allowed_hosts_is_a_copy(self, gate):
        gate.allowed_hosts.append("evil.example")
        assert "evil.example" not in gate.allowed_hosts


class TestAdmissionResult:
    """Tests for AdmissionResult constructors."""

    def test_accept(self):
        result = AdmissionResult.accept(SUBPROTOCOL, None)
        assert result.accepted and result.status_code is None

    def test_rejections_carry_matching_codes(self):
        assert (AdmissionResult.forbidden().status_code, AdmissionResult.forbidden().close_code) == (403, 4403)
        assert (AdmissionResult.bad_request().status_code, AdmissionResult.bad_request().close_code) == (400, 4400)
