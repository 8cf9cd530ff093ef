# debug_server/core/config.py
"""
Central configuration for the hypothesis debug server.

This module defines a single `settings` object (Pydantic BaseSettings) that reads
configuration from `DEBUG_SERVER_*` environment variables and a local `.env` file.

Guiding principles:
- Config is declared once, imported everywhere.
- Defaults match what the debugging workflow expects (port 3947, .claude-logs/).
- The command line can still override port and log file at startup.
"""

from __future__ import annotations

import os
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_LOG_FILENAME = "debug.ndjson"
LOG_LEVELS = ("CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG")


class Settings(BaseSettings):
    """
    Server settings loaded from environment variables and optional `.env`.

    Every field can be overridden by keyword when constructing `Settings(...)`,
    which is how the CLI applies its positional `port` and `logfile` arguments.
    """

    model_config = SettingsConfigDict(
        env_prefix="DEBUG_SERVER_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        case_sensitive=False,
    )

    # -----------------------
    # Runtime
    # -----------------------
    ENV: str = Field(default="dev", description="Environment: dev|test|prod")
    LOG_LEVEL: str = Field(default="INFO", description="Console logging level (e.g., INFO, DEBUG)")

    # -----------------------
    # Listener
    # -----------------------
    HOST: str = Field(default="127.0.0.1", description="Interface to bind")
    PORT: int = Field(default=3947, ge=1, le=65535, description="Port to listen on")

    # -----------------------
    # Log store
    # -----------------------
    LOG_DIR: str = Field(default=".claude-logs", description="Directory for the default log file")
    LOG_FILE: Optional[str] = Field(
        default=None,
        description="Explicit NDJSON file path (defaults to LOG_DIR/debug.ndjson)",
    )

    # -----------------------
    # Request limits
    # -----------------------
    MAX_BODY_MB: int = Field(
        default=10,
        ge=1,
        le=500,
        description="Max request body size in megabytes",
    )

    @property
    def MAX_BODY_BYTES(self) -> int:
        return int(self.MAX_BODY_MB) * 1024 * 1024

    @property
    def LOG_PATH(self) -> str:
        """Resolved path of the NDJSON log file."""
        if self.LOG_FILE:
            return self.LOG_FILE
        return os.path.join(self.LOG_DIR, DEFAULT_LOG_FILENAME)

    # -----------------------
    # Validators / normalizers
    # -----------------------
    @field_validator("ENV")
    @classmethod
    def _normalize_env(cls, v: str) -> str:
        return (v or "dev").strip().lower()

    @field_validator("LOG_LEVEL")
    @classmethod
    def _normalize_log_level(cls, v: str) -> str:
        level = (v or "INFO").strip().upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"LOG_LEVEL must be one of {', '.join(LOG_LEVELS)}")
        return level

    @field_validator("HOST", "LOG_DIR")
    @classmethod
    def _strip_strings(cls, v: str) -> str:
        return (v or "").strip()

    @field_validator("LOG_FILE")
    @classmethod
    def _blank_log_file_is_unset(cls, v: Optional[str]) -> Optional[str]:
        v = (v or "").strip()
        return v or None


# Singleton instance imported across the codebase.
settings = Settings()
