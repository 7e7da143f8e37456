"""Centralized configuration management with environment-aware defaults.

This module implements the configuration surface of a Baton application using
Pydantic Settings, providing type-safe configuration with validation and
environment variable support.

Features:
- **Type safety**: All configuration values are validated and typed
- **Environment variables**: Supports .env files and environment overrides
- **Nested configuration**: Uses __ delimiter for complex config structures
- **Caching**: Configuration is cached for performance

Configuration sources (in order of precedence):
1. Environment variables
2. .env file in project root
3. Default values in model definitions
"""

import os
from functools import lru_cache
from typing import Literal

from pydantic import BaseModel, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ADDR = ":8000"
DEFAULT_HOST = "0.0.0.0"  # noqa: S104 - an empty host means every interface


class LogConfig(BaseModel):
    """Simplified logging configuration."""

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(
        default="INFO",
        description="Logging level",
    )
    log_formatter_type: Literal["console", "json"] | None = Field(
        default=None,
        description="Log output formatter. Auto-detected if not specified.",
    )
    excluded_paths: list[str] = Field(
        default_factory=lambda: ["/health"],
        description="Paths to exclude from request logging",
    )
    slow_request_threshold_ms: int = Field(
        default=1000,
        gt=0,
        description="Threshold for slow request warnings (milliseconds)",
    )
    sensitive_fields: list[str] = Field(
        default_factory=lambda: [
            "password",
            "token",
            "secret",
            "api_key",
            "authorization",
        ],
        description="Field names to redact",
    )


class Settings(BaseSettings):
    """Main settings class for the application."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        validate_default=True,
        env_nested_delimiter="__",
    )

    # Application settings
    app_name: str = Field(default="Baton", description="Application name")
    app_version: str = Field(default="0.1.0", description="Application version")
    environment: Literal["development", "staging", "production"] = Field(
        default="development",
        description="Environment the application is running in",
    )
    debug: bool = Field(default=False, description="Debug mode flag")

    # Listen address, read from ADDR
    addr: str = Field(default=DEFAULT_ADDR, description="Listen address (host:port)")

    # Logging configuration
    log_config: LogConfig = Field(
        default_factory=LogConfig, description="Logging configuration"
    )

    def model_post_init(self, __context: object) -> None:
        """Post initialization to set environment-based defaults."""
        super().model_post_init(__context)

        if self.log_config.log_formatter_type is None:
            self.log_config.log_formatter_type = self._detect_formatter()

    def _detect_formatter(self) -> Literal["console", "json"]:
        """Auto-detect log formatter based on environment."""
        if os.getenv("K_SERVICE") or os.getenv("AWS_EXECUTION_ENV"):
            return "json"
        if self.environment == "development":
            return "console"
        return "json"

    @field_validator("addr", mode="before")
    @classmethod
    def empty_addr_to_default(cls, v: str | None) -> str:
        """Fall back to the default address when ADDR is set but empty."""
        _ = cls
        if not v:
            return DEFAULT_ADDR
        return v


@lru_cache
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()


def parse_addr(addr: str) -> tuple[str, int]:
    """Split a ``host:port`` listen address.

    An empty host (``":8000"``) listens on every interface.

    Args:
        addr: The listen address.

    Returns:
        tuple[str, int]: Host and port.

    Raises:
        ValueError: If the port is missing or not a valid port number.
    """
    host, sep, port_str = addr.rpartition(":")
    if not sep or not port_str.isdigit():
        msg = f"invalid listen address {addr!r}"
        raise ValueError(msg)
    port = int(port_str)
    max_port = 65535
    if port > max_port:
        msg = f"invalid port in listen address {addr!r}"
        raise ValueError(msg)
    return host.strip("[]") or DEFAULT_HOST, port
