"""Configuration management for LinkVault."""

from typing import Optional
from pydantic_settings import BaseSettings
from pydantic import Field


class Config(BaseSettings):
    """Application configuration."""

    # Server settings
    host: str = Field(
        default="0.0.0.0",
        description="Host to bind to"
    )

    port: int = Field(
        default=3001,
        description="Port to listen on"
    )

    # Short link settings
    base_url: str = Field(
        default="http://localhost:3001",
        description="Base URL for short links when the request does not say otherwise"
    )

    path_prefix: str = Field(
        default="",
        description="Path prefix for short URLs (e.g., '/s' for /s/abc123)"
    )

    short_code_length: int = Field(
        default=6,
        ge=4,
        le=32,
        description="Length of generated short codes"
    )

    link_ttl_days: int = Field(
        default=30,
        ge=1,
        description="Days a link stays live after creation"
    )

    # Persistence settings
    links_file: str = Field(
        default="links.json",
        description="JSON file holding every link"
    )

    flush_delay_ms: int = Field(
        default=300,
        ge=0,
        description="Quiet period after the last change before the links file is rewritten"
    )

    # Rate limiting
    rate_limit: int = Field(
        default=10,
        ge=1,
        description="Create/verify requests allowed per client per window"
    )

    rate_limit_window_seconds: int = Field(
        default=60,
        ge=1,
        description="Length of a rate-limit window"
    )

    rate_limit_sweep_seconds: int = Field(
        default=300,
        ge=1,
        description="How often stale rate-limit windows are purged"
    )

    trust_forwarded_for: bool = Field(
        default=False,
        description="Rate limit by the first X-Forwarded-For hop (only behind a trusted proxy)"
    )

    # Logging settings
    log_level: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)"
    )

    log_file: Optional[str] = Field(
        default=None,
        description="Log file path (logs to stdout if not specified)"
    )

    log_json: bool = Field(
        default=False,
        description="Use JSON format for logs"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",  # Ignore extra environment variables
    }

    @property
    def flush_delay_seconds(self) -> float:
        return self.flush_delay_ms / 1000


def load_config() -> Config:
    """Load configuration from environment."""
    return Config()
