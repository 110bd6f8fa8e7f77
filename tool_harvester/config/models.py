"""Pydantic models used across Tool-Harvester configuration flow."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator


class SourceType(str, Enum):
    """Extraction strategies known to the scrape manager."""

    AITOOLNET = "aitoolnet"
    FUTURETOOLS = "futuretools"
    GENERIC = "generic"


class ScrapingSource(BaseModel):
    """Named, reusable scrape configuration."""

    id: str = ""
    name: str
    source_type: SourceType
    target_url: str = ""
    enabled: bool = True
    schedule: str | None = Field(
        default=None,
        description="Five-field cron expression evaluated by the scheduler.",
    )
    item_limit: int = Field(default=25, ge=1)
    concurrency: int = Field(default=5, ge=1)

    @field_validator("schedule", mode="before")
    @classmethod
    def _blank_schedule(cls, value: Any) -> Any:
        if isinstance(value, str) and not value.strip():
            return None
        return value

    @model_validator(mode="after")
    def _validate_schedule(self) -> "ScrapingSource":
        if self.schedule is not None and len(self.schedule.split()) != 5:
            raise ValueError("Cron schedule requires five fields")
        return self


class FetchSettings(BaseModel):
    """HTTP behaviour shared by every fetch."""

    timeout: float = Field(default=30.0, gt=0)
    retries: int = Field(default=3, ge=1)
    backoff_delay: float = Field(default=1.0, ge=0)
    user_agents: list[str] = Field(default_factory=list)


class HarvestConfig(BaseModel):
    """Global controls shared across sources."""

    fetch: FetchSettings = Field(default_factory=FetchSettings)
    default_item_limit: int = Field(default=25, ge=1)
    default_concurrency: int = Field(default=5, ge=1)
    max_candidates: int = Field(default=500, ge=1)
    catalog_path: Path = Field(default=Path("data/catalog.db"))

    @field_validator("catalog_path", mode="before")
    @classmethod
    def _coerce_path(cls, value: Any) -> Path:
        return Path(value)

    def resolved_catalog_path(self, base_dir: Path) -> Path:
        """Return catalog database path relative to the project root."""

        if not self.catalog_path.is_absolute():
            return (base_dir / self.catalog_path).resolve()
        return self.catalog_path


__all__ = [
    "FetchSettings",
    "HarvestConfig",
    "ScrapingSource",
    "SourceType",
]
