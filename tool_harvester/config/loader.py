"""Configuration loading helpers for Tool-Harvester."""

from __future__ import annotations

import json
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Iterable

import yaml

from .models import HarvestConfig, ScrapingSource

GLOBAL_CONFIG_FILENAME = "harvest_config.yaml"
SOURCES_FILENAME = "sources.yaml"
DEFAULT_SOURCES_TEMPLATE = "default_sources.yaml"


def _read_file(path: Path) -> dict:
    text = path.read_text(encoding="utf-8")
    if path.suffix in (".yaml", ".yml"):
        data = yaml.safe_load(text) or {}
    else:
        data = json.loads(text)
    if not isinstance(data, dict):
        raise ValueError(f"Configuration file must contain a mapping: {path}")
    return data


def _write_file(path: Path, payload: dict) -> None:
    with path.open("w", encoding="utf-8") as stream:
        if path.suffix in (".yaml", ".yml"):
            yaml.safe_dump(payload, stream, allow_unicode=True, sort_keys=False)
        else:
            json.dump(payload, stream, indent=2, ensure_ascii=False)


@dataclass(slots=True)
class ConfigLocator:
    """Resolve important paths from project root."""

    project_root: Path | None = None
    data_dir: Path | None = None
    logs_dir: Path | None = None

    def __post_init__(self) -> None:
        env_root = os.environ.get("TOOL_HARVESTER_HOME")
        if env_root:
            root = Path(env_root).expanduser().resolve()
        else:
            root = (self.project_root or Path(__file__).resolve().parents[2]).resolve()
        self.project_root = root
        self.data_dir = (root / "data").resolve()
        self.logs_dir = (root / "logs").resolve()
        self.ensure_directories()

    def ensure_directories(self) -> None:
        for directory in (self.data_dir, self.logs_dir):
            directory.mkdir(parents=True, exist_ok=True)

    def global_config_path(self) -> Path:
        return self.data_dir / GLOBAL_CONFIG_FILENAME

    def sources_path(self) -> Path:
        return self.data_dir / SOURCES_FILENAME


class ConfigRepository:
    """Repository encapsulating config IO and schema validation."""

    def __init__(self, locator: ConfigLocator | None = None) -> None:
        self.locator = locator or ConfigLocator()
        self._global_cache: HarvestConfig | None = None

    # ------------------------------------------------------------------
    # Global configuration helpers
    # ------------------------------------------------------------------
    def load_global_config(self) -> HarvestConfig:
        if self._global_cache is not None:
            return self._global_cache
        path = self.locator.global_config_path()
        if path.exists():
            payload = _read_file(path)
            global_cfg = HarvestConfig.model_validate(payload)
        else:
            global_cfg = HarvestConfig()
            self.save_global_config(global_cfg)
        self._global_cache = global_cfg
        return global_cfg

    def save_global_config(self, config: HarvestConfig) -> None:
        path = self.locator.global_config_path()
        payload = config.model_dump(mode="json")
        _write_file(path, payload)
        self._global_cache = config

    # ------------------------------------------------------------------
    # Source configuration helpers
    # ------------------------------------------------------------------
    def load_sources(self) -> list[ScrapingSource]:
        """Return stored sources, seeding the store from the bundled defaults."""

        path = self.locator.sources_path()
        if not path.exists():
            payload = _read_file(self.template_path(DEFAULT_SOURCES_TEMPLATE))
            sources = self._parse_sources(payload)
            self.save_sources(sources)
            return sources
        return self._parse_sources(_read_file(path))

    def save_sources(self, sources: Iterable[ScrapingSource]) -> Path:
        path = self.locator.sources_path()
        payload = {"sources": [source.model_dump(mode="json") for source in sources]}
        _write_file(path, payload)
        return path

    @staticmethod
    def _parse_sources(payload: dict) -> list[ScrapingSource]:
        entries = payload.get("sources") or []
        if not isinstance(entries, list):
            raise ValueError("'sources' must be a list of source mappings")
        return [ScrapingSource.model_validate(entry) for entry in entries]

    # ------------------------------------------------------------------
    # Utility
    # ------------------------------------------------------------------
    @staticmethod
    def template_path(template_name: str) -> Path:
        """Return the template file path from the built-in templates directory."""

        templates_dir = Path(__file__).resolve().parent / "templates"
        template_path = templates_dir / template_name
        if not template_path.exists():
            raise FileNotFoundError(f"Template not found: {template_path}")
        return template_path


__all__ = ["ConfigLocator", "ConfigRepository"]
