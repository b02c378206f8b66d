"""
Shared module for configuration and infrastructure used by the chat gateway.

STRUCTURE:
- shared.config: Configuration
  - settings.py: Environment config (Pydantic)
  - logging.py: Structured logging and security audit helpers

- shared.infrastructure: Runtime support
  - correlation.py: Connection key attached to every log record

IMPORT EXAMPLES:
    from shared.config.settings import settings
    from shared.config.logging import get_logger, audit_ws_connection
"""
