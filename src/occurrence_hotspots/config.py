"""
Application settings.

Values are read from environment variables prefixed ``HOTSPOTS_`` and from a
local ``.env`` file. Defaults reproduce the red squirrel / United Kingdom
2006-2016 walkthrough.

Usage::

    from occurrence_hotspots.config import get_settings

    settings = get_settings()
    print(settings.species, settings.year_start, settings.year_end)
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from pydantic import Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from occurrence_hotspots.schemas import AdminLevel, OccurrenceQuery


class Settings(BaseSettings):
    """Runtime configuration for fetch, build and serve."""

    model_config = SettingsConfigDict(
        env_prefix="HOTSPOTS_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    app_name: str = "occurrence-hotspots"
    app_env: str = "development"
    debug: bool = False

    data_dir: Path = Path("data")

    # Default occurrence query
    species: str = "Sciurus vulgaris"
    country: str = "United Kingdom"
    year_start: int = Field(default=2006, ge=1600)
    year_end: int = Field(default=2016, ge=1600)
    limit: int = Field(default=5000, ge=1, le=100_000)

    # Boundary + projection
    admin_level: AdminLevel = AdminLevel.ADM1
    target_epsg: int | None = None

    api_port: int = 8000

    @model_validator(mode="after")
    def _check_years(self) -> Settings:
        if self.year_start > self.year_end:
            msg = f"year_start ({self.year_start}) is after year_end ({self.year_end})"
            raise ValueError(msg)
        return self


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Return the process-wide settings instance."""
    return Settings()


def default_query(settings: Settings | None = None) -> OccurrenceQuery:
    """Occurrence query built from the configured defaults."""
    settings = settings or get_settings()
    return OccurrenceQuery(
        scientific_name=settings.species,
        country=settings.country,
        year_start=settings.year_start,
        year_end=settings.year_end,
        limit=settings.limit,
    )
