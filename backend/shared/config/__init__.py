"""
Configuration module: Settings and logging.
"""

from shared.config.settings import settings, get_settings, Settings, DEFAULT_ALLOWED_HOSTS
from shared.config.logging import get_logger, setup_logging

__all__ = [
    # settings
    "settings",
    "get_settings",
    "Settings",
    "DEFAULT_ALLOWED_HOSTS",
    # logging
    "get_logger",
    "setup_logging",
]
