"""Duplicate-aware reconciliation of scraped records against the catalog."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Any

import structlog

from .catalog import Catalog
from .engine.links import normalize_website_url, slugify
from .records import CatalogEntry, PartialRecord, ScrapeResult

DEFAULT_CATEGORY = "Content AI"
DEFAULT_PRICING = "Unknown"

MISSING_FIELDS = "missing required fields"
DUPLICATE_SLUG = "duplicate slug"
DUPLICATE_URL = "duplicate website URL"
PERSISTENCE_ERROR = "persistence error"

_OPTIONAL_UPDATE_FIELDS = (
    "description",
    "short_description",
    "category",
    "pricing",
    "logo_url",
    "tags",
    "features",
)


@dataclass(frozen=True)
class IngestionPolicy:
    dry_run: bool = False
    upsert: bool = False


@dataclass
class SkippedItem:
    key: str
    reason: str


@dataclass
class IngestionReport:
    """Outcome of one reconciliation run.

    ``updated_count`` stays ``None`` unless the upsert policy was requested.
    """

    scraped_count: int = 0
    inserted_count: int = 0
    updated_count: int | None = None
    skipped_count: int = 0
    skipped_items: list[SkippedItem] = field(default_factory=list)
    errors: list[str] = field(default_factory=list)
    dry_run: bool = False
    source_id: str | None = None

    def skip(self, key: str, reason: str) -> None:
        self.skipped_count += 1
        self.skipped_items.append(SkippedItem(key=key, reason=reason))

    def to_dict(self) -> dict[str, Any]:
        data = asdict(self)
        if self.updated_count is None:
            data.pop("updated_count")
        return data


def insert_fields(record: PartialRecord) -> dict[str, Any]:
    """Full catalog payload with defaults for every optional field."""

    return {
        "name": record.name,
        "slug": record.slug,
        "description": record.description or record.short_description or record.name,
        "short_description": record.short_description or record.description or record.name,
        "category": record.category or DEFAULT_CATEGORY,
        "pricing": record.pricing or DEFAULT_PRICING,
        "website_url": record.website_url,
        "logo_url": record.logo_url or None,
        "features": list(record.features),
        "tags": list(record.tags),
        "source_detail_url": record.source_detail_url or None,
    }


def update_fields(record: PartialRecord) -> dict[str, Any]:
    """Mutable fields to overwrite; empty optional values keep the catalog's."""

    fields: dict[str, Any] = {"name": record.name, "website_url": record.website_url}
    for name in _OPTIONAL_UPDATE_FIELDS:
        value = getattr(record, name)
        if value:
            fields[name] = list(value) if isinstance(value, list) else value
    return fields


class Reconciler:
    """Apply insert-only, dry-run or upsert policy to one scrape result."""

    def __init__(self, catalog: Catalog, logger: structlog.BoundLogger | None = None) -> None:
        self.catalog = catalog
        self.logger = logger or structlog.get_logger("tool_harvester.ingest")

    def reconcile(
        self,
        result: ScrapeResult,
        policy: IngestionPolicy | None = None,
        *,
        source_id: str | None = None,
    ) -> IngestionReport:
        policy = policy or IngestionPolicy()
        report = IngestionReport(
            updated_count=0 if policy.upsert else None,
            errors=list(result.errors),
            dry_run=policy.dry_run,
            source_id=source_id,
        )
        log = self.logger.bind(source=source_id, dry_run=policy.dry_run, upsert=policy.upsert)
        if not result.success:
            log.error("ingestion_aborted", errors=result.errors)
            return report

        report.scraped_count = len(result.items)
        for record in result.items:
            self._apply(record, policy, report, log)

        log.info(
            "ingestion_finished",
            scraped=report.scraped_count,
            inserted=report.inserted_count,
            updated=report.updated_count,
            skipped=report.skipped_count,
            errors=len(report.errors),
        )
        return report

    def find_duplicate(self, record: PartialRecord) -> tuple[CatalogEntry | None, str | None]:
        """Match by slug first, then by normalised website URL."""

        existing = self.catalog.lookup_by_unique_key(record.slug)
        if existing is not None:
            return existing, DUPLICATE_SLUG
        existing = self.catalog.lookup_by_external_url(normalize_website_url(record.website_url))
        if existing is not None:
            return existing, DUPLICATE_URL
        return None, None

    # ------------------------------------------------------------------
    def _apply(
        self,
        record: PartialRecord,
        policy: IngestionPolicy,
        report: IngestionReport,
        log: structlog.BoundLogger,
    ) -> None:
        if not record.slug and record.name:
            record = record.model_copy(update={"slug": slugify(record.name)})
        key = record.slug or record.name or record.website_url or "unnamed"
        if not record.is_valid:
            report.skip(key, MISSING_FIELDS)
            return

        try:
            existing, reason = self.find_duplicate(record)
            if existing is None:
                if not policy.dry_run:
                    self.catalog.insert(insert_fields(record))
                    log.debug("record_inserted", slug=record.slug)
                report.inserted_count += 1
                return
            if policy.upsert and not policy.dry_run:
                fields = update_fields(record)
                holder = self.catalog.lookup_by_external_url(
                    normalize_website_url(record.website_url)
                )
                if holder is not None and holder.id != existing.id:
                    # another entry owns this website; keep the stored URL
                    fields.pop("website_url")
                    log.info("website_url_kept", slug=record.slug, owner=holder.slug)
                if self.catalog.update(existing.id, fields) is None:
                    raise LookupError(f"catalog entry {existing.id} no longer exists")
                log.debug("record_updated", slug=record.slug, entry_id=existing.id)
                report.updated_count = (report.updated_count or 0) + 1
                return
            report.skip(key, reason or DUPLICATE_SLUG)
        except Exception as exc:  # noqa: BLE001
            log.warning("record_persist_failed", slug=record.slug, error=str(exc))
            report.skip(key, PERSISTENCE_ERROR)
            report.errors.append(f"{record.name or 'unnamed'}: {exc}")


__all__ = [
    "DEFAULT_CATEGORY",
    "DEFAULT_PRICING",
    "DUPLICATE_SLUG",
    "DUPLICATE_URL",
    "IngestionPolicy",
    "IngestionReport",
    "MISSING_FIELDS",
    "Reconciler",
    "SkippedItem",
    "insert_fields",
    "update_fields",
]
