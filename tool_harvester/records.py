"""Records flowing from extractors to the catalog."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

from .engine.links import slugify

REQUIRED_FIELDS = ("name", "slug", "website_url")


class PartialRecord(BaseModel):
    """Best-effort subset of a catalog entry produced by one extractor.

    camelCase keys are accepted so exports of the web catalog can be re-imported.
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    name: str = ""
    slug: str = ""
    website_url: str = ""
    short_description: str | None = None
    description: str | None = None
    category: str | None = None
    pricing: str | None = None
    tags: list[str] = Field(default_factory=list)
    features: list[str] = Field(default_factory=list)
    logo_url: str | None = None
    source_detail_url: str | None = None

    @field_validator("name", "slug", "website_url", mode="before")
    @classmethod
    def _strip_required(cls, value: Any) -> str:
        if value is None:
            return ""
        return str(value).strip()

    @field_validator("tags", "features", mode="before")
    @classmethod
    def _coerce_list(cls, value: Any) -> list[str]:
        if value is None:
            return []
        return value

    @model_validator(mode="after")
    def _derive_slug(self) -> "PartialRecord":
        if not self.slug and self.name:
            self.slug = slugify(self.name)
        return self

    def missing_fields(self) -> list[str]:
        return [name for name in REQUIRED_FIELDS if not getattr(self, name)]

    @property
    def is_valid(self) -> bool:
        return not self.missing_fields()


class CatalogEntry(BaseModel):
    """Reference shape of a record held by the external catalog."""

    id: str
    slug: str
    name: str
    short_description: str = ""
    description: str = ""
    category: str = ""
    pricing: str = "Unknown"
    website_url: str = ""
    logo_url: str | None = None
    features: list[str] = Field(default_factory=list)
    tags: list[str] = Field(default_factory=list)
    source_detail_url: str | None = None
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


@dataclass
class ScrapeMetadata:
    url: str
    candidates_found: int = 0
    candidates_processed: int = 0


@dataclass
class ScrapeResult:
    """Output of one extractor invocation.

    ``success`` is false only when the run produced nothing at all (primary
    listing unreachable, bad configuration); item-level problems land in
    ``errors``.
    """

    success: bool
    items: list[PartialRecord] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    metadata: ScrapeMetadata | None = None

    @classmethod
    def failure(cls, error: str, url: str = "") -> "ScrapeResult":
        return cls(success=False, errors=[error], metadata=ScrapeMetadata(url=url))


__all__ = [
    "CatalogEntry",
    "PartialRecord",
    "REQUIRED_FIELDS",
    "ScrapeMetadata",
    "ScrapeResult",
]
