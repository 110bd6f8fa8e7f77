"""Two-phase extractor skeleton: discover candidates, then fetch them in bounded parallel."""

from __future__ import annotations

from abc import ABC, abstractmethod
from threading import Event, Lock
from typing import ClassVar
from urllib.parse import urldefrag, urlparse

import structlog

from ..config import ScrapingSource, SourceType
from ..engine import FetchError, Fetcher, HtmlPage, run_bounded
from ..engine.links import DEFAULT_RULES, DetailPathRules, bare_host, is_likely_detail_path, same_site
from ..records import PartialRecord, ScrapeMetadata, ScrapeResult

LARGE_RUN_THRESHOLD = 100


class DiscardedCandidate(Exception):
    """A fetched candidate that does not describe a usable item."""


class BaseExtractor(ABC):
    """Turn a listing page and its detail pages into partial records."""

    name: ClassVar[SourceType]
    default_url: ClassVar[str] = ""
    site_domain: ClassVar[str] = ""
    rules: ClassVar[DetailPathRules] = DEFAULT_RULES
    min_link_text: ClassVar[int] = 2
    max_link_text: ClassVar[int | None] = None

    def __init__(
        self,
        fetcher: Fetcher,
        *,
        max_candidates: int = 500,
        logger: structlog.BoundLogger | None = None,
    ) -> None:
        self.fetcher = fetcher
        self.max_candidates = max_candidates
        self.logger = logger or structlog.get_logger("tool_harvester.extractors")

    # ------------------------------------------------------------------
    def scrape(self, source: ScrapingSource, *, cancel: Event | None = None) -> ScrapeResult:
        url = source.target_url or self.default_url
        if not url:
            return ScrapeResult.failure("URL is required")
        log = self.logger.bind(source=source.id, extractor=self.name.value)
        site_host = self.site_domain or bare_host(url)

        try:
            listing = self.fetcher.fetch(url)
        except FetchError as exc:
            log.error("listing_fetch_failed", url=url, error=str(exc))
            return ScrapeResult.failure(str(exc), url=url)

        errors: list[str] = []
        found = self.discover(HtmlPage(listing.text, listing.url), site_host)
        for page_url in self.listing_urls(url, source.item_limit)[1:]:
            try:
                response = self.fetcher.fetch(page_url)
            except FetchError as exc:
                errors.append(f"Error fetching {page_url}: {exc}")
                log.warning("listing_page_failed", url=page_url, error=str(exc))
                continue
            found.extend(self.discover(HtmlPage(response.text, response.url), site_host))

        candidates = list(dict.fromkeys(found))[: self.candidate_cap(source.item_limit)]
        log.info("candidates_discovered", url=url, candidates=len(candidates))

        items: list[PartialRecord] = []
        lock = Lock()

        def _worker(detail_url: str, _index: int) -> None:
            response = self.fetcher.fetch(detail_url)
            record = self.extract(HtmlPage(response.text, response.url), detail_url, site_host)
            if not record.is_valid:
                raise DiscardedCandidate(
                    "missing required fields: " + ", ".join(record.missing_fields())
                )
            with lock:
                items.append(record)

        def _on_error(detail_url: str, _index: int, exc: Exception) -> None:
            if isinstance(exc, DiscardedCandidate):
                message = f"Discarded {detail_url}: {exc}"
                log.debug("candidate_discarded", url=detail_url, reason=str(exc))
            else:
                message = f"Error scraping {detail_url}: {exc}"
                log.warning("detail_failed", url=detail_url, error=str(exc))
            with lock:
                errors.append(message)

        dispatched = run_bounded(
            candidates,
            _worker,
            source.concurrency,
            on_error=_on_error,
            cancel=cancel,
            thread_name_prefix=f"harvest-{self.name.value}",
        )
        if dispatched < len(candidates):
            errors.append(f"Run cancelled: {len(candidates) - dispatched} candidates not processed")

        log.info("scrape_finished", items=len(items), errors=len(errors))
        return ScrapeResult(
            success=True,
            items=items,
            errors=errors,
            metadata=ScrapeMetadata(
                url=url,
                candidates_found=len(candidates),
                candidates_processed=dispatched,
            ),
        )

    # ------------------------------------------------------------------
    def listing_urls(self, url: str, limit: int) -> list[str]:
        """Listing pages to mine; the first one is the primary page."""

        return [url]

    def candidate_cap(self, limit: int) -> int:
        if limit >= LARGE_RUN_THRESHOLD:
            return limit
        return max(1, min(self.max_candidates, limit))

    def discover(self, page: HtmlPage, site_host: str) -> list[str]:
        """Same-site links whose text and path look like an item entry."""

        found: list[str] = []
        for anchor in page.anchors():
            text_length = len(anchor.text)
            if text_length < self.min_link_text:
                continue
            if self.max_link_text is not None and text_length >= self.max_link_text:
                continue
            target, _fragment = urldefrag(anchor.url)
            if not same_site(target, site_host):
                continue
            if not is_likely_detail_path(urlparse(target).path, self.rules):
                continue
            found.append(target)
        return found

    @abstractmethod
    def extract(self, page: HtmlPage, detail_url: str, site_host: str) -> PartialRecord:
        """Build a record from one detail page or raise :class:`DiscardedCandidate`."""


__all__ = ["BaseExtractor", "DiscardedCandidate", "LARGE_RUN_THRESHOLD"]
