"""In-memory store of scrape source configurations."""

from __future__ import annotations

from threading import Lock
from typing import Any, Iterable

from .config import ScrapingSource, SourceType


class SourceNotFoundError(LookupError):
    """Raised when a caller names a source id the registry does not hold."""

    def __init__(self, source_id: str) -> None:
        super().__init__(f"Source not found: {source_id}")
        self.source_id = source_id


class SourceRegistry:
    """CRUD over :class:`ScrapingSource`, keyed by generated id.

    Lives as long as the process that builds it; durability is left to
    :class:`~tool_harvester.config.ConfigRepository`.
    """

    def __init__(self, sources: Iterable[ScrapingSource] | None = None) -> None:
        self._lock = Lock()
        self._sources: dict[str, ScrapingSource] = {}
        self._next_id = 1
        if sources:
            self.load(sources)

    def load(self, sources: Iterable[ScrapingSource]) -> None:
        """Add sources that already carry ids; sources without one get a fresh id."""

        for source in sources:
            if source.id:
                with self._lock:
                    self._sources[source.id] = source
            else:
                self.create(**source.model_dump(exclude={"id"}))

    def create(self, **fields: Any) -> ScrapingSource:
        with self._lock:
            source_id = self._allocate_id()
            source = ScrapingSource.model_validate({**fields, "id": source_id})
            self._sources[source_id] = source
            return source

    def get(self, source_id: str) -> ScrapingSource | None:
        with self._lock:
            return self._sources.get(source_id)

    def require(self, source_id: str) -> ScrapingSource:
        source = self.get(source_id)
        if source is None:
            raise SourceNotFoundError(source_id)
        return source

    def list(self) -> list[ScrapingSource]:
        with self._lock:
            return list(self._sources.values())

    def update(self, source_id: str, **changes: Any) -> ScrapingSource | None:
        with self._lock:
            current = self._sources.get(source_id)
            if current is None:
                return None
            payload = {**current.model_dump(), **changes, "id": source_id}
            updated = ScrapingSource.model_validate(payload)
            self._sources[source_id] = updated
            return updated

    def delete(self, source_id: str) -> bool:
        with self._lock:
            return self._sources.pop(source_id, None) is not None

    def enabled(self) -> list[ScrapingSource]:
        return [source for source in self.list() if source.enabled]

    def by_type(self, source_type: SourceType) -> list[ScrapingSource]:
        return [source for source in self.list() if source.source_type == source_type]

    def _allocate_id(self) -> str:
        while f"source-{self._next_id}" in self._sources:
            self._next_id += 1
        source_id = f"source-{self._next_id}"
        self._next_id += 1
        return source_id


__all__ = ["SourceNotFoundError", "SourceRegistry"]
