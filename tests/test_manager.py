from __future__ import annotations

from tool_harvester.config import HarvestConfig, SourceType
from tool_harvester.extractors import AitoolnetExtractor, FutureToolsExtractor, GenericExtractor
from tool_harvester.manager import ScrapeManager, default_extractors
from tool_harvester.records import PartialRecord, ScrapeResult


class RecordingExtractor:
    def __init__(self, result: ScrapeResult | None = None, error: Exception | None = None) -> None:
        self.result = result or ScrapeResult(success=True)
        self.error = error
        self.sources = []

    def scrape(self, source, *, cancel=None) -> ScrapeResult:
        self.sources.append(source)
        if self.error is not None:
            raise self.error
        return self.result


def test_default_extractors_cover_every_type(fake_fetcher) -> None:
    extractors = default_extractors(fake_fetcher({}), HarvestConfig(max_candidates=40))
    assert set(extractors) == set(SourceType)
    assert isinstance(extractors[SourceType.AITOOLNET], AitoolnetExtractor)
    assert isinstance(extractors[SourceType.FUTURETOOLS], FutureToolsExtractor)
    assert isinstance(extractors[SourceType.GENERIC], GenericExtractor)
    assert all(extractor.max_candidates == 40 for extractor in extractors.values())


def test_available_lists_type_names(fake_fetcher) -> None:
    manager = ScrapeManager(default_extractors(fake_fetcher({})))
    assert sorted(manager.available()) == ["aitoolnet", "futuretools", "generic"]


def test_unknown_type_returns_failed_result(sample_source) -> None:
    manager = ScrapeManager({SourceType.GENERIC: RecordingExtractor()})
    result = manager.scrape_one(sample_source(source_type=SourceType.FUTURETOOLS))
    assert result.success is False
    assert result.errors == ["Unknown scraper type: futuretools"]


def test_limit_override_does_not_touch_the_source(sample_source) -> None:
    extractor = RecordingExtractor()
    manager = ScrapeManager({SourceType.GENERIC: extractor})
    source = sample_source(item_limit=10)
    manager.scrape_one(source, limit=3)
    assert extractor.sources[0].item_limit == 3
    assert source.item_limit == 10


def test_extractor_crash_becomes_failed_result(sample_source) -> None:
    manager = ScrapeManager({SourceType.GENERIC: RecordingExtractor(error=RuntimeError("boom"))})
    result = manager.scrape_one(sample_source())
    assert result.success is False
    assert result.errors == ["boom"]


def test_scrape_many_keys_results_by_source(sample_source) -> None:
    ok = ScrapeResult(success=True, items=[PartialRecord(name="A", website_url="https://a.io")])
    manager = ScrapeManager({SourceType.GENERIC: RecordingExtractor(result=ok)})
    results = manager.scrape_many(
        [
            sample_source(id="source-1"),
            sample_source(id="source-2"),
            sample_source(id="source-3", source_type=SourceType.AITOOLNET),
        ]
    )
    assert set(results) == {"source-1", "source-2", "source-3"}
    assert results["source-1"].success is True
    assert results["source-3"].errors == ["Unknown scraper type: aitoolnet"]
    assert manager.scrape_many([]) == {}
