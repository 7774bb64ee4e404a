"""
Settings Module for the Database Liveness Monitor

Configuration management using Pydantic Settings.
Supports environment variables and .env files, with validation
and the defaults the monitor has always shipped with.
"""

from __future__ import annotations

from enum import Enum
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import (
    Field,
    SecretStr,
    ValidationInfo,
    field_validator,
    model_validator
)
from pydantic_settings import BaseSettings, SettingsConfigDict


class LogLevel(str, Enum):
    """Logging level enumeration."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


def lenient_bool(cls: Any, value: Any, info: ValidationInfo) -> Any:
    """
    Parse a boolean flag the way the monitor always has.

    Only "true" and "false" (any case) are recognised; any other
    string falls back to the field's default instead of failing.
    """
    if isinstance(value, str):
        lowered = value.strip().lower()
        if lowered == "true":
            return True
        if lowered == "false":
            return False
        return cls.model_fields[info.field_name].default
    return value


class BaseSettingsConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
        validate_default=True
    )


class DatabaseSettings(BaseSettingsConfig):
    """
    Monitored Database Settings

    The target URI is any SQLAlchemy async URL. The connection-level
    timeouts are optional; unset ones inherit the probe timeout
    (resolved by ``Settings``).
    """

    model_config = SettingsConfigDict(
        env_prefix="DB_",
        env_file=".env",
        extra="ignore"
    )

    uri: str = Field(
        default="postgresql+asyncpg://postgres@localhost:5432/postgres",
        min_length=1,
        description="SQLAlchemy async URL of the monitored database"
    )
    connect_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        description="Driver connect timeout in milliseconds"
    )
    socket_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        description="Driver socket/command timeout in milliseconds"
    )
    wait_queue_timeout: Optional[int] = Field(
        default=None,
        ge=1,
        description="Time to wait for a pooled connection in milliseconds"
    )
    max_idle_time: Optional[int] = Field(
        default=None,
        ge=1,
        description="Age after which pooled connections are recycled, in milliseconds"
    )

    @property
    def is_sqlite(self) -> bool:
        """Check whether the target is a SQLite database."""
        return self.uri.startswith("sqlite")


class ProbeSettings(BaseSettingsConfig):
    """
    Probe Loop Settings

    Period and per-step timeout budget of the liveness probe, plus the
    two logging switches that control how much of each probe is shown.
    """

    model_config = SettingsConfigDict(
        env_prefix="PROBE_",
        env_file=".env",
        extra="ignore"
    )

    interval: int = Field(
        default=1000,
        ge=1,
        description="Milliseconds between two probes"
    )
    timeout: int = Field(
        default=800,
        ge=1,
        description="Milliseconds allowed for each connect or ping step"
    )
    verbose: bool = Field(
        default=False,
        description="Log the outcome of every probe"
    )
    show_errors: bool = Field(
        default=True,
        description="Log the raw error when a probe fails"
    )

    @field_validator("verbose", "show_errors", mode="before")
    @classmethod
    def parse_flags(cls, v: Any, info: ValidationInfo) -> Any:
        """Parse the true/false switches leniently."""
        return lenient_bool(cls, v, info)


class AlertSettings(BaseSettingsConfig):
    """
    Telegram Alert Settings

    Without a token the monitor still runs; transitions are only logged.
    """

    model_config = SettingsConfigDict(
        env_prefix="ALERT_",
        env_file=".env",
        extra="ignore"
    )

    token: Optional[SecretStr] = Field(
        default=None,
        description="Telegram Bot API token from @BotFather"
    )
    chat_id: str = Field(
        default="@db_alerts",
        min_length=1,
        description="Chat ID or @channel username that receives alerts"
    )

    @field_validator("token", mode="before")
    @classmethod
    def empty_token_is_none(cls, v: Any) -> Any:
        """Treat an empty token as not configured."""
        if isinstance(v, str) and not v.strip():
            return None
        return v

    @property
    def enabled(self) -> bool:
        """Check whether alerts can actually be delivered."""
        return self.token is not None


class LoggingSettings(BaseSettingsConfig):
    """Logging Configuration Settings"""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=".env",
        extra="ignore"
    )

    level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Minimum log level"
    )
    colorize: bool = Field(
        default=True,
        description="Colorize console output"
    )
    to_file: bool = Field(
        default=False,
        description="Also write logs to a rotating file"
    )
    file_path: Path = Field(
        default=Path("logs/monitor.log"),
        description="Log file location"
    )
    file_rotation: str = Field(
        default="10 MB",
        description="Rotation threshold for the log file"
    )
    file_retention: str = Field(
        default="7 days",
        description="How long rotated log files are kept"
    )

    @field_validator("colorize", "to_file", mode="before")
    @classmethod
    def parse_flags(cls, v: Any, info: ValidationInfo) -> Any:
        """Parse the true/false switches leniently."""
        return lenient_bool(cls, v, info)

    @property
    def logs_dir(self) -> Path:
        """Directory holding the log files."""
        return self.file_path.parent


class Settings(BaseSettingsConfig):
    """
    Main Settings Class

    Aggregates all settings sections and provides the main
    configuration interface for the application.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore"
    )

    # Application info
    app_name: str = Field(
        default="DB Liveness Monitor",
        description="Application name"
    )
    app_version: str = Field(
        default="1.0.0",
        description="Application version"
    )

    # Status endpoint
    web_host: str = Field(
        default="0.0.0.0",
        description="Status endpoint bind address"
    )
    web_port: int = Field(
        default=8080,
        ge=1,
        le=65535,
        description="Status endpoint port"
    )

    # Nested settings
    database: DatabaseSettings = Field(
        default_factory=DatabaseSettings
    )
    probe: ProbeSettings = Field(
        default_factory=ProbeSettings
    )
    alert: AlertSettings = Field(
        default_factory=AlertSettings
    )
    logging: LoggingSettings = Field(
        default_factory=LoggingSettings
    )

    @model_validator(mode="after")
    def resolve_database_timeouts(self) -> "Settings":
        """Default every unset driver timeout to the probe timeout."""
        timeout = self.probe.timeout
        db = self.database
        if db.connect_timeout is None:
            db.connect_timeout = timeout
        if db.socket_timeout is None:
            db.socket_timeout = timeout
        if db.wait_queue_timeout is None:
            db.wait_queue_timeout = timeout
        if db.max_idle_time is None:
            db.max_idle_time = timeout
        return self

    def to_dict(self, *, exclude_secrets: bool = True) -> Dict[str, Any]:
        """Convert settings to dictionary."""
        data = self.model_dump(mode="json")

        if exclude_secrets:
            data["alert"].pop("token", None)

        return data


@lru_cache()
def get_settings() -> Settings:
    """
    Get cached settings instance.

    This function is cached to ensure a single settings instance
    is used throughout the application lifecycle.

    Returns:
        Settings: Application settings instance
    """
    return Settings()
