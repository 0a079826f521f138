"""Application configuration."""
from __future__ import annotations

import logging
from functools import lru_cache
from pathlib import Path
from typing import Literal

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


# ----------------------------
# Paths
# ----------------------------
ROOT = Path(__file__).resolve().parent  # this is /impact_app
DATA_DIR = ROOT / "data"                # packaged with impact_app

CATALOG_PATH = DATA_DIR / "domains_v1.json"


class Settings(BaseSettings):
    """Settings read from the environment or a local .env file."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    # Application
    APP_NAME: str = "Impact Assessment Tool"
    APP_VERSION: str = "1.0.0"
    LOG_LEVEL: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"

    # Data
    CATALOG_PATH: Path = Field(
        default=CATALOG_PATH,
        description="JSON file holding the domain/question catalog",
    )
    SEED_DEMO_DATA: bool = False

    # Exports
    PDF_TITLE: str = "Organizational Impact Assessment"
    TOP_DOMAINS_LIMIT: int = Field(default=3, ge=1, le=7)

    @field_validator("CATALOG_PATH")
    @classmethod
    def validate_catalog_path(cls, v: Path) -> Path:
        if v.suffix.lower() != ".json":
            raise ValueError(f"CATALOG_PATH must point to a .json file, got {v}")
        return v


@lru_cache
def get_settings() -> Settings:
    return Settings()


def configure_logging(level: str | None = None) -> None:
    """Apply LOG_LEVEL to the root logger. Safe to call on every rerun."""
    logging.basicConfig(
        level=getattr(logging, (level or get_settings().LOG_LEVEL).upper()),
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
