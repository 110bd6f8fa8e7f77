"""Pipeline entry points wiring registry, scrape manager and reconciler together."""

from __future__ import annotations

from threading import Event
from typing import Iterable

import structlog

from .catalog import Catalog
from .config import ScrapingSource
from .ingest import IngestionPolicy, IngestionReport, Reconciler
from .logging_conf import source_logger
from .manager import ScrapeManager
from .records import PartialRecord, ScrapeMetadata, ScrapeResult
from .registry import SourceRegistry


class Orchestrator:
    """Central coordinator answering trigger requests with ingestion reports."""

    def __init__(
        self,
        registry: SourceRegistry,
        manager: ScrapeManager,
        catalog: Catalog,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.registry = registry
        self.manager = manager
        self.catalog = catalog
        self.reconciler = Reconciler(catalog)
        self.logger = logger or structlog.get_logger("tool_harvester.orchestrator")

    # ------------------------------------------------------------------
    def ingest_source(
        self,
        source_id: str,
        policy: IngestionPolicy | None = None,
        *,
        limit: int | None = None,
        cancel: Event | None = None,
    ) -> IngestionReport:
        """Scrape one source and reconcile it; unknown ids raise ``SourceNotFoundError``."""

        source = self.registry.require(source_id)
        self.logger.info("ingest_started", source=source.id, limit=limit or source.item_limit)
        result = self.manager.scrape_one(source, limit=limit, cancel=cancel)
        return self._reconcile(source.id, result, policy)

    def ingest_enabled(
        self,
        policy: IngestionPolicy | None = None,
        *,
        cancel: Event | None = None,
    ) -> dict[str, IngestionReport]:
        """Scrape every enabled source concurrently, then reconcile one by one."""

        sources = self.registry.enabled()
        self.logger.info("ingest_all_started", sources=len(sources))
        results = self.manager.scrape_many(sources, cancel=cancel)
        return {
            source_id: self._reconcile(source_id, result, policy)
            for source_id, result in results.items()
        }

    def ingest_records(
        self,
        records: Iterable[PartialRecord],
        policy: IngestionPolicy | None = None,
        *,
        origin: str = "import",
    ) -> IngestionReport:
        """Reconcile records produced outside the extractors, e.g. a JSON export."""

        items = list(records)
        result = ScrapeResult(
            success=True,
            items=items,
            metadata=ScrapeMetadata(url=origin, candidates_found=len(items)),
        )
        return self.reconciler.reconcile(result, policy, source_id=origin)

    def _reconcile(
        self, source_id: str, result: ScrapeResult, policy: IngestionPolicy | None
    ) -> IngestionReport:
        report = self.reconciler.reconcile(result, policy, source_id=source_id)
        source_logger(source_id).info(
            "ingest_finished",
            scraped=report.scraped_count,
            inserted=report.inserted_count,
            updated=report.updated_count,
            skipped=report.skipped_count,
            errors=report.errors,
        )
        return report

    # ------------------------------------------------------------------
    def register_schedules(self, scheduler) -> int:
        """Schedule enabled sources that carry a cron expression."""

        scheduled = 0
        for source in self.registry.enabled():
            if source.schedule:
                scheduler.schedule_source(source, self.run_scheduled)
                scheduled += 1
        scheduler.start()
        return scheduled

    def run_scheduled(self, source: ScrapingSource) -> None:
        report = self.ingest_source(source.id, IngestionPolicy())
        self.logger.info("scheduled_ingest_finished", **report.to_dict())


__all__ = ["Orchestrator"]
