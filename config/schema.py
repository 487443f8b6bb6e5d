"""Configuration schema for Config Keeper using Pydantic.

Two groups:
- CallbackSettings: knobs of the callback notification pipeline
- KeeperSettings: service-wide settings (database, server, logging)
"""

from __future__ import annotations

import logging
from pathlib import Path

from pydantic import BaseModel, Field, field_validator

DEFAULT_DB_PATH = Path.home() / ".config-keeper" / "keeper.db"

# ============================================================================
# Callback Configuration
# ============================================================================


class CallbackSettings(BaseModel):
    """Settings for change-notification delivery to listener endpoints."""

    channel_capacity: int = Field(100, gt=0, description="Pending change notifications before producers block")
    max_attempts: int = Field(3, gt=0, description="Delivery attempts per listener")
    base_delay_ms: int = Field(100, gt=0, description="Backoff base delay in milliseconds")
    max_delay_ms: int = Field(5000, gt=0, description="Backoff cap in milliseconds")
    request_timeout_sec: float = Field(10.0, gt=0, description="Per-attempt HTTP timeout")
    max_concurrency: int = Field(10, gt=0, description="Concurrent deliveries per notification")

    @property
    def base_delay(self) -> float:
        return self.base_delay_ms / 1000

    @property
    def max_delay(self) -> float:
        return self.max_delay_ms / 1000


# ============================================================================
# Main Settings
# ============================================================================


class KeeperSettings(BaseModel):
    """Main Config Keeper configuration.

    Note: This uses BaseModel instead of BaseSettings; environment variables
    are folded in explicitly by ``config.loader.load_settings``.
    """

    db_path: Path = Field(DEFAULT_DB_PATH, description="SQLite database file")
    host: str = Field("0.0.0.0", description="Bind address")
    port: int = Field(8001, gt=0, lt=65536, description="Bind port")
    log_level: str = Field("INFO", description="Root logging level")
    callback: CallbackSettings = Field(default_factory=CallbackSettings, description="Callback pipeline")

    @field_validator("db_path")
    @classmethod
    def expand_db_path(cls, v: Path) -> Path:
        return Path(v).expanduser()

    @field_validator("log_level")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        level = v.strip().upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Unknown log level: {v}")
        return level
