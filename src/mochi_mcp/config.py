"""Configuration management using Pydantic settings."""

import logging
import sys

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    # Mochi API
    mochi_api_key: str | None = Field(
        default=None, description="Mochi API key (Account Settings in the Mochi app)"
    )
    mochi_base_url: str = Field(
        default="https://app.mochi.cards/api", description="Mochi REST API base URL"
    )
    request_timeout: float = Field(
        default=30.0, description="Timeout for a single Mochi API request in seconds"
    )

    # Attachments
    mochi_allow_local_files: bool = Field(
        default=True, description="Allow add_attachment to read file-path on the stdio server"
    )
    mochi_http_allow_local_files: bool = Field(
        default=False,
        description="Allow add_attachment to read file-path on the HTTP and SSE servers",
    )

    # HTTP front-ends
    host: str = Field(default="127.0.0.1", description="Bind address for the HTTP servers")
    port: int = Field(default=8000, description="Bind port for the HTTP servers")

    log_level: str = Field(default="INFO", description="Logging level")


def configure_logging(level: str | None = None) -> None:
    """Send log records to stderr.

    Stdout belongs to the stdio transport, so nothing may log there.

    Args:
        level: Logging level name. Uses settings.log_level if not provided.
    """
    logging.basicConfig(
        level=(level or settings.log_level).upper(),
        format=LOG_FORMAT,
        stream=sys.stderr,
    )


# Global settings instance
settings = Settings()
