"""
Configuration settings for the skill tree player.

Uses Pydantic Settings for environment variable management with .env file support.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Any, Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="SKILLTREE_",
        case_sensitive=False,
        extra="ignore",
    )

    # ========================================
    # Content
    # ========================================
    catalog_source: str = Field(
        default="",
        description="Catalog JSON path or http(s) URL; empty uses the bundled sample",
    )
    catalog_timeout_seconds: float = Field(
        default=10.0,
        description="HTTP timeout when fetching a remote catalog",
    )

    # ========================================
    # Progress Persistence
    # ========================================
    progress_backend: Literal["json", "sqlite", "memory"] = Field(
        default="json",
        description="Where the progress snapshot is stored",
    )
    progress_dir: Path = Field(
        default=Path.home() / ".skilltree",
        description="Directory for on-disk progress backends",
    )
    progress_key: str = Field(
        default="hardwareGameProgress",
        description="Storage slot for the progress snapshot",
    )

    # ========================================
    # Gameplay
    # ========================================
    starting_lives: int = Field(
        default=5,
        ge=1,
        description="Lives at the start of each lesson and after a retry",
    )
    points_per_correct: int = Field(
        default=10,
        description="Score awarded for each correct answer",
    )
    practice_limit: int = Field(
        default=5,
        ge=1,
        description="Maximum exercises in a practice session",
    )
    practice_min_weak: int = Field(
        default=3,
        ge=1,
        description="Weak exercises needed before practice opens",
    )

    # ========================================
    # API Server
    # ========================================
    api_host: str = Field(
        default="127.0.0.1",
        description="API server host",
    )
    api_port: int = Field(
        default=8100,
        description="API server port",
    )

    # ========================================
    # Logging
    # ========================================
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = Field(
        default="INFO",
        description="Logging level",
    )

    def get_player_config(self) -> dict[str, Any]:
        """Get gameplay tunables as a dictionary."""
        return {
            "starting_lives": self.starting_lives,
            "points_per_correct": self.points_per_correct,
            "practice_limit": self.practice_limit,
            "practice_min_weak": self.practice_min_weak,
        }


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
