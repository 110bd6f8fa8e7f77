from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from tool_harvester.config import FetchSettings, HarvestConfig, ScrapingSource, SourceType


def test_scraping_source_defaults() -> None:
    source = ScrapingSource(name="Example", source_type="generic")
    assert source.source_type is SourceType.GENERIC
    assert source.enabled is True
    assert source.item_limit == 25
    assert source.concurrency == 5
    assert source.schedule is None


def test_scraping_source_rejects_bad_values() -> None:
    with pytest.raises(ValidationError):
        ScrapingSource(name="Example", source_type="unknown")
    with pytest.raises(ValidationError):
        ScrapingSource(name="Example", source_type="generic", concurrency=0)
    with pytest.raises(ValidationError):
        ScrapingSource(name="Example", source_type="generic", item_limit=0)


def test_schedule_requires_five_fields() -> None:
    assert ScrapingSource(name="x", source_type="generic", schedule="  ").schedule is None
    assert ScrapingSource(name="x", source_type="generic", schedule="0 3 * * *").schedule == "0 3 * * *"
    with pytest.raises(ValidationError):
        ScrapingSource(name="x", source_type="generic", schedule="every day")


def test_fetch_settings_defaults() -> None:
    settings = FetchSettings()
    assert settings.retries == 3
    assert settings.backoff_delay == 1.0
    assert settings.timeout == 30.0


def test_catalog_path_resolution(tmp_path: Path) -> None:
    config = HarvestConfig()
    assert config.resolved_catalog_path(tmp_path) == (tmp_path / "data" / "catalog.db").resolve()
    absolute = tmp_path / "elsewhere.db"
    assert HarvestConfig(catalog_path=str(absolute)).resolved_catalog_path(Path("/unused")) == absolute
