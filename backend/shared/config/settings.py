"""
Application settings loaded from environment variables.
Uses pydantic-settings for type-safe configuration.
"""

from functools import lru_cache
from pydantic_settings import BaseSettings


# Hosts allowed to open a chat connection when ALLOWED_HOSTS is not set.
# Entries are compared against the Host header, port included.
DEFAULT_ALLOWED_HOSTS: tuple[str, ...] = (
    "localhost",
    "localhost:3490",
    "goat:3490",  # LAN test box
    "192.168.1.2:3490",
)


class Settings(BaseSettings):
    """Application settings with defaults for development."""

    # Environment
    environment: str = "development"
    debug: bool = True

    # Server
    chat_host: str = "0.0.0.0"
    chat_port: int = 3490

    # Admission control
    # Comma-separated list of allowed Host values (empty uses DEFAULT_ALLOWED_HOSTS)
    allowed_hosts: str = ""
    chat_subprotocol: str = "beej-chat-protocol"

    # WebSocket
    ws_path: str = "/"
    ws_max_message_size: int = 64 * 1024  # 64 KB

    # Directory with the browser client (index.html, chat-client.js).
    # Empty disables the static mount.
    static_dir: str = ""

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        case_sensitive = False

    @property
    def allowed_host_list(self) -> list[str]:
        """Whitelist of Host header values, parsed from allowed_hosts."""
        if self.allowed_hosts:
            return [h.strip() for h in self.allowed_hosts.split(",") if h.strip()]
        return list(DEFAULT_ALLOWED_HOSTS)

    def validate_production_settings(self) -> list[str]:
        """
        Validate that the configuration is safe for production.
        Returns a list of validation errors. Empty list means all checks pass.
        """
        errors = []

        if self.environment == "production":
            if self.debug:
                errors.append("DEBUG must be False in production")

            # The default whitelist only covers development hosts
            if not self.allowed_hosts:
                errors.append(
                    "ALLOWED_HOSTS must be set in production (comma-separated list of host[:port])"
                )

        return errors


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


# Convenience exports
settings = get_settings()
