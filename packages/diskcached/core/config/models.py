"""Configuration models for diskcached."""

from __future__ import annotations

from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field


class LoggingConfig(BaseModel):
    """Python logging configuration."""

    level: str = Field(
        default="INFO",
        pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$",
        description="Root log level",
    )
    format: str = Field(
        default="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        description="Text log format (ignored when structured)",
    )
    structured: bool = Field(default=False, description="Emit one JSON object per log line")


class DiskCacheConfig(BaseModel):
    """Application configuration for the default disk store."""

    model_config = ConfigDict(extra="forbid")

    root: Path = Field(
        default=Path("~/.cache/diskcached"),
        description="Directory holding the default store's records",
    )
    default_ttl_seconds: float | None = Field(
        default=None,
        ge=0.0,
        description="TTL used by ttl_policy() when the caller gives none (None = never expire)",
    )
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
