"""
Configuration schema using Pydantic for validation.

Single source of truth for the resolver's own settings.
Validates on load, fails fast on invalid config.
"""

from __future__ import annotations

from enum import Enum
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field, field_validator


DEFAULT_ENVIRONMENT = "development"
RUNTIME_RECORD_KEY = "content/config/process/runtime.json"


class LogLevel(str, Enum):
    """Log levels."""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class StoreConfig(BaseModel):
    """Where the file-backed configuration store keeps its documents."""

    model_config = ConfigDict(extra="forbid")

    root_dir: Path = Field(
        default=Path("state/config"),
        description="Root directory of the configuration store"
    )


class LoggingConfig(BaseModel):
    """Logging configuration."""

    model_config = ConfigDict(extra="forbid")

    log_dir: Path = Field(
        default=Path("logs"),
        description="Base directory for stream log files"
    )

    log_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="File log level"
    )

    console_level: LogLevel = Field(
        default=LogLevel.INFO,
        description="Console log level"
    )

    json_logs: bool = Field(
        default=True,
        description="Write file logs as JSON"
    )


class EnvbootConfig(BaseModel):
    """
    Root settings object.

    RULES:
    - default_environment must be a non-empty name
    - runtime_record_key must be a relative store key
    """

    model_config = ConfigDict(extra="forbid")

    default_environment: str = Field(
        default=DEFAULT_ENVIRONMENT,
        description="Environment used when nothing overrides it"
    )

    runtime_record_key: str = Field(
        default=RUNTIME_RECORD_KEY,
        description="Store key of the persisted runtime record"
    )

    store: StoreConfig = Field(default_factory=StoreConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)

    @field_validator("default_environment")
    @classmethod
    def _non_empty_environment(cls, v: str) -> str:
        v = v.strip()
        if not v:
            raise ValueError("default_environment must not be empty")
        return v

    @field_validator("runtime_record_key")
    @classmethod
    def _relative_record_key(cls, v: str) -> str:
        if not v or v.startswith("/") or ".." in Path(v).parts:
            raise ValueError(f"runtime_record_key must be a relative path: {v!r}")
        return v
