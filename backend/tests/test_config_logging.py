"""
Tests for settings, structured logging and connection correlation.
"""

import logging

import pytest

from shared.config.logging import (
    DevelopmentFormatter,
    StructuredFormatter,
    audit_ws_connection,
    get_logger,
)
from shared.config.settings import DEFAULT_ALLOWED_HOSTS, Settings
from shared.infrastructure.correlation import ConnectionIdFilter, connection_id_var
from chat_gateway.components.core.context import WebSocketContext, sanitize_log_data


class TestSettings:
    """Tests for Settings."""

    def test_defaults(self):
        s = Settings(allowed_hosts="")
        assert s.chat_port == 3490
        assert s.chat_subprotocol == "beej-chat-protocol"
        assert s.ws_path == "/"
        assert s.allowed_host_list == list(DEFAULT_ALLOWED_HOSTS)

    def test_allowed_hosts_parsed_from_comma_list(self):
        s = Settings(allowed_hosts=" chat.example:443 , localhost:3490,,")
        assert s.allowed_host_list == ["chat.example:443", "localhost:3490"]

    def test_environment_override(self, monkeypatch):
        monkeypatch.setenv("CHAT_PORT", "4000")
        monkeypatch.setenv("ALLOWED_HOSTS", "chat.example")
        s = Settings()
        assert s.chat_port == 4000
        assert s.allowed_host_list == ["chat.example"]

    def test_production_requires_explicit_whitelist(self):
        s = Settings(environment="production", debug=False, allowed_hosts="")
        errors = s.validate_production_settings()
        assert len(errors) == 1
        assert "ALLOWED_HOSTS" in errors[0]

    def test_production_rejects_debug(self):
        s = Settings(environment="production", debug=True, allowed_hosts="chat.example")
        assert s.validate_production_settings() == ["DEBUG must be False in production"]

    def test_development_has_no_production_errors(self):
        assert Settings(environment="development").validate_production_settings() == []


class TestStructuredLogging:
    """Tests for the structured logger and formatters."""

    def test_keyword_arguments_become_extra_data(self, caplog):
        logger = get_logger("chat_gateway.test")
        with caplog.at_level(logging.INFO, logger="chat_gateway.test"):
            logger.info("Chat message relayed", recipients=3)

        record = caplog.records[-1]
        assert record.getMessage() == "Chat message relayed"
        assert record.extra_data == {"recipients": 3}

    def test_structured_formatter_emits_json(self):
        record = logging.LogRecord("chat_gateway", logging.INFO, __file__, 1, "hello", (), None)
        record.extra_data = {"remote": "127.0.0.1:50000"}
        record.connection_id = "127.0.0.1:50000"

        output = StructuredFormatter().format(record)

        assert '"message": "hello"' in output
        assert '"remote": "127.0.0.1:50000"' in output

    def test_development_formatter_includes_fields(self):
        record = logging.LogRecord("chat_gateway", logging.WARNING, __file__, 1, "dropped", (), None)
        record.extra_data = {"size": 2048}
        record.connection_id = "-"

        output = DevelopmentFormatter().format(record)

        assert "dropped" in output
        assert "size=2048" in output


class TestAuditLogging:
    """Tests for audit_ws_connection."""

    @pytest.mark.parametrize(
        "event_type,level",
        [
            ("ACCEPTED", logging.INFO),
            ("CONNECT", logging.INFO),
            ("DISCONNECT", logging.INFO),
            ("REJECTED", logging.WARNING),
            ("DUPLICATE", logging.WARNING),
        ],
    )
    def test_event_levels(self, caplog, event_type, level):
        with caplog.at_level(logging.INFO, logger="security.audit"):
            audit_ws_connection(event_type, endpoint="/", remote="127.0.0.1:50000", reason="x")

        record = caplog.records[-1]
        assert record.levelno == level
        assert record.getMessage() == f"WS_AUDIT: {event_type}"
        assert record.extra_data["remote"] == "127.0.0.1:50000"

    def test_context_audit_sanitizes_headers(self, caplog):
        ctx = WebSocketContext(
            endpoint="/",
            host='evil"\x00host',
            remote_host="10.0.0.1",
            remote_port=4242,
        )
        with caplog.at_level(logging.INFO, logger="security.audit"):
            ctx.audit("REJECTED", reason="host_not_allowed")

        data = caplog.records[-1].extra_data
        assert data["host"] == 'evil\\"host'
        assert data["remote"] == "10.0.0.1:4242"
        assert data["reason"] == "host_not_allowed"


class TestSanitizeLogData:
    """Tests for sanitize_log_data."""

    def test_truncates_long_values(self):
        assert sanitize_log_data("a" * 150, max_length=100) == "a" * 100 + "..."

    def test_strips_control_and_direction_characters(self):
        assert sanitize_log_data("ab\x1b[31mc\u202ed") == "ab[31mcd"

    def test_escapes_quotes_and_backslashes(self):
        assert sanitize_log_data('a\\b"c') == 'a\\\\b\\"c'


class TestConnectionIdFilter:
    """Tests for connection correlation."""

    def test_adds_current_connection(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", (), None)
        token = connection_id_var.set("127.0.0.1:50000")
        try:
            assert ConnectionIdFilter().filter(record) is True
        finally:
            connection_id_var.reset(token)
        assert record.connection_id == "127.0.0.1:50000"

    def test_placeholder_outside_connection(self):
        record = logging.LogRecord("x", logging.INFO, __file__, 1, "m", (), None)
        ConnectionIdFilter().filter(record)
        assert record.connection_id == "-"
