"""Centralized configuration using Pydantic Settings.

Runtime knobs for the scoring pipeline. Scoring constants (item maps,
reliabilities, thresholds, archetype criteria) are data, not settings:
they live in the versioned YAML tables loaded by ``psyscore.tables``.
``SCORING_TABLES_DIR`` points the loader at an alternative table set.

All settings can be overridden via environment variables.
"""

from __future__ import annotations

import os
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Skip reading .env file during testing to use code defaults
ENV_FILE = None if os.environ.get("TESTING") else ".env"
ENV_FILE_ENCODING = "utf-8"


class ScoringSettings(BaseSettings):
    """Scoring pipeline behaviour."""

    model_config = SettingsConfigDict(
        env_prefix="SCORING_",
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    tables_dir: Path | None = Field(
        default=None,
        description="Directory holding the YAML scoring tables (None = packaged defaults)",
    )
    scale_size: int | None = Field(
        default=None,
        ge=2,
        le=11,
        description="Response scale size override (None = value from item_domains.yaml)",
    )
    enable_keyword_fallback: bool = Field(
        default=True,
        description="Attribute untagged, unmapped items by keyword match (degraded mode)",
    )
    exclude_imputed_from_confidence: bool = Field(
        default=True,
        description="Ignore imputed midpoints when computing confidence bands",
    )

    @field_validator("tables_dir")
    @classmethod
    def validate_tables_dir(cls, v: Path | None) -> Path | None:
        """Ensure an explicit tables directory exists."""
        if v is not None and not v.is_dir():
            raise ValueError(f"tables_dir does not exist or is not a directory: {v}")
        return v


class LoggingSettings(BaseSettings):
    """Logging configuration."""

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        extra="ignore",
    )

    level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = "INFO"
    format: Literal["json", "console"] = "json"
    include_timestamp: bool = True
    include_caller: bool = True

    @field_validator("level", mode="before")
    @classmethod
    def normalize_level(cls, v: object) -> object:
        """Accept lowercase level names."""
        return v.upper() if isinstance(v, str) else v


class Settings(BaseSettings):
    """Root settings combining all configuration groups."""

    model_config = SettingsConfigDict(
        env_file=ENV_FILE,
        env_file_encoding=ENV_FILE_ENCODING,
        env_nested_delimiter="__",
        extra="ignore",
    )

    scoring: ScoringSettings = Field(default_factory=ScoringSettings)
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


@lru_cache
def get_settings() -> Settings:
    """Get cached settings singleton."""
    return Settings()


def get_scoring_settings() -> ScoringSettings:
    """Get scoring settings."""
    return get_settings().scoring
