from __future__ import annotations

import pytest

from tool_harvester.config import SourceType
from tool_harvester.ingest import IngestionPolicy
from tool_harvester.manager import ScrapeManager
from tool_harvester.orchestrator import Orchestrator
from tool_harvester.records import PartialRecord, ScrapeResult
from tool_harvester.registry import SourceNotFoundError, SourceRegistry


class CannedExtractor:
    def __init__(self, records: list[PartialRecord]) -> None:
        self.records = records
        self.limits: list[int] = []

    def scrape(self, source, *, cancel=None) -> ScrapeResult:
        self.limits.append(source.item_limit)
        return ScrapeResult(success=True, items=list(self.records[: source.item_limit]))


class StubScheduler:
    def __init__(self) -> None:
        self.scheduled: list[str] = []
        self.started = False

    def schedule_source(self, source, callback) -> None:
        self.scheduled.append(source.id)

    def start(self) -> None:
        self.started = True


@pytest.fixture
def orchestrator(sample_source, catalog, tmp_path, monkeypatch) -> Orchestrator:
    monkeypatch.setenv("TOOL_HARVESTER_HOME", str(tmp_path))
    records = [
        PartialRecord(name="Alpha", website_url="https://alpha.io"),
        PartialRecord(name="Beta", website_url="https://beta.io"),
    ]
    registry = SourceRegistry(
        [
            sample_source(id="source-1", schedule="0 3 * * *"),
            sample_source(id="source-2"),
            sample_source(id="source-3", enabled=False, schedule="0 4 * * *"),
        ]
    )
    manager = ScrapeManager({SourceType.GENERIC: CannedExtractor(records)})
    return Orchestrator(registry, manager, catalog)


def test_ingest_source_reports_and_persists(orchestrator: Orchestrator) -> None:
    report = orchestrator.ingest_source("source-1")
    assert report.source_id == "source-1"
    assert report.inserted_count == 2
    assert len(orchestrator.catalog) == 2


def test_ingest_source_applies_limit_override(orchestrator: Orchestrator) -> None:
    report = orchestrator.ingest_source("source-1", IngestionPolicy(dry_run=True), limit=1)
    assert report.scraped_count == 1
    assert report.inserted_count == 1
    assert len(orchestrator.catalog) == 0


def test_ingest_source_unknown_id(orchestrator: Orchestrator) -> None:
    with pytest.raises(SourceNotFoundError):
        orchestrator.ingest_source("nope")


def test_ingest_enabled_reconciles_each_source(orchestrator: Orchestrator) -> None:
    reports = orchestrator.ingest_enabled()
    assert set(reports) == {"source-1", "source-2"}
    assert sum(report.inserted_count for report in reports.values()) == 2
    assert sum(report.skipped_count for report in reports.values()) == 2


def test_ingest_records_uses_origin(orchestrator: Orchestrator) -> None:
    report = orchestrator.ingest_records(
        [PartialRecord(name="Gamma", website_url="https://gamma.io")], origin="export.json"
    )
    assert report.source_id == "export.json"
    assert report.inserted_count == 1


def test_register_schedules_only_enabled_with_cron(orchestrator: Orchestrator) -> None:
    scheduler = StubScheduler()
    assert orchestrator.register_schedules(scheduler) == 1
    assert scheduler.scheduled == ["source-1"]
    assert scheduler.started is True


def test_run_scheduled_ingests_source(orchestrator: Orchestrator, tmp_path) -> None:
    orchestrator.run_scheduled(orchestrator.registry.require("source-2"))
    assert len(orchestrator.catalog) == 2
    assert (tmp_path / "logs" / "sources" / "source-2.log").exists()
