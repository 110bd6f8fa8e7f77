"""Shared fixtures: source builders, an offline fetcher and a temp config home."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Callable, Iterable

import pytest

from tool_harvester.catalog import InMemoryCatalog
from tool_harvester.config import ConfigLocator, ConfigRepository, ScrapingSource, SourceType
from tool_harvester.engine import FetchError, FetchResponse


class FakeFetcher:
    """Serve canned HTML keyed by URL; unknown URLs fail like an exhausted retry."""

    def __init__(self, pages: dict[str, str] | None = None) -> None:
        self.pages = dict(pages or {})
        self.calls: list[str] = []

    def fetch(self, url: str, *, timeout: float | None = None) -> FetchResponse:
        self.calls.append(url)
        if url not in self.pages:
            raise FetchError(url, 3, 404)
        return FetchResponse(url=url, status_code=200, text=self.pages[url], headers={})


@pytest.fixture
def fake_fetcher() -> Callable[[dict[str, str]], FakeFetcher]:
    def _builder(pages: dict[str, str]) -> FakeFetcher:
        return FakeFetcher(pages)

    return _builder


@pytest.fixture
def sample_source() -> Callable[..., ScrapingSource]:
    def _builder(**overrides: Any) -> ScrapingSource:
        base: dict[str, Any] = {
            "id": "source-1",
            "name": "Example",
            "source_type": SourceType.GENERIC,
            "target_url": "https://example.com/",
            "item_limit": 10,
            "concurrency": 2,
        }
        base.update(overrides)
        return ScrapingSource(**base)

    return _builder


@pytest.fixture
def catalog() -> InMemoryCatalog:
    return InMemoryCatalog()


@pytest.fixture
def temp_config_repository(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> Iterable[ConfigRepository]:
    monkeypatch.setenv("TOOL_HARVESTER_HOME", str(tmp_path))
    locator = ConfigLocator(project_root=tmp_path)
    repository = ConfigRepository(locator)
    yield repository
