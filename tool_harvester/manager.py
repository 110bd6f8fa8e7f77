"""Dispatch sources to their extractor."""

from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from threading import Event
from typing import Iterable, Mapping

import structlog

from .config import HarvestConfig, ScrapingSource, SourceType
from .engine import Fetcher
from .extractors import AitoolnetExtractor, BaseExtractor, FutureToolsExtractor, GenericExtractor
from .records import ScrapeResult


def default_extractors(
    fetcher: Fetcher, config: HarvestConfig | None = None
) -> dict[SourceType, BaseExtractor]:
    """Fixed dispatch table covering every :class:`SourceType`."""

    max_candidates = (config or HarvestConfig()).max_candidates
    extractors: list[BaseExtractor] = [
        AitoolnetExtractor(fetcher, max_candidates=max_candidates),
        FutureToolsExtractor(fetcher, max_candidates=max_candidates),
        GenericExtractor(fetcher, max_candidates=max_candidates),
    ]
    return {extractor.name: extractor for extractor in extractors}


class ScrapeManager:
    """Resolve ``source.source_type`` to an extractor and run it."""

    def __init__(
        self,
        extractors: Mapping[SourceType, BaseExtractor],
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self._extractors = dict(extractors)
        self.logger = logger or structlog.get_logger("tool_harvester.manager")

    def available(self) -> list[str]:
        return [source_type.value for source_type in self._extractors]

    def scrape_one(
        self,
        source: ScrapingSource,
        *,
        limit: int | None = None,
        cancel: Event | None = None,
    ) -> ScrapeResult:
        """Run one source; configuration and unexpected errors become failed results."""

        extractor = self._extractors.get(source.source_type)
        if extractor is None:
            source_type = getattr(source.source_type, "value", source.source_type)
            self.logger.error("unknown_source_type", source=source.id, source_type=source_type)
            return ScrapeResult.failure(
                f"Unknown scraper type: {source_type}", url=source.target_url
            )
        if limit is not None:
            source = source.model_copy(update={"item_limit": max(1, limit)})
        try:
            return extractor.scrape(source, cancel=cancel)
        except Exception as exc:  # noqa: BLE001
            self.logger.exception("scrape_crashed", source=source.id)
            return ScrapeResult.failure(str(exc), url=source.target_url)

    def scrape_many(
        self,
        sources: Iterable[ScrapingSource],
        *,
        cancel: Event | None = None,
    ) -> dict[str, ScrapeResult]:
        """Run every source on its own thread and key results by source id."""

        sources = list(sources)
        if not sources:
            return {}
        with ThreadPoolExecutor(
            max_workers=len(sources), thread_name_prefix="harvest-source"
        ) as executor:
            futures = {
                source.id: executor.submit(self.scrape_one, source, cancel=cancel)
                for source in sources
            }
            return {source_id: future.result() for source_id, future in futures.items()}


__all__ = ["ScrapeManager", "default_extractors"]
