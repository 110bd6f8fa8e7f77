from __future__ import annotations

from pathlib import Path

import pytest

from tool_harvester.logging_conf import configure_logging, source_log_path, source_logger


def test_source_logger_writes_per_source_file(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOOL_HARVESTER_HOME", str(tmp_path))
    configure_logging()
    logger = source_logger("source-42")
    logger.info("ingest_started")
    assert (tmp_path / "logs" / "sources" / "source-42.log").exists()
    assert (tmp_path / "logs" / "harvester.log").exists()


def test_source_log_file_stays_inside_sources_dir(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("TOOL_HARVESTER_HOME", str(tmp_path))
    sources_dir = (tmp_path / "logs" / "sources").resolve()

    source_logger("../etc/x").info("ingest_started")

    assert source_log_path("../etc/x") == sources_dir / "etc_x.log"
    assert (sources_dir / "etc_x.log").exists()
    assert not (tmp_path / "etc").exists()


@pytest.mark.parametrize(
    ("source_id", "file_name"),
    [
        ("source-7", "source-7.log"),
        ("a.b", "a_b.log"),
        ("aitoolnet / popular", "aitoolnet_popular.log"),
        ("...", "source.log"),
    ],
)
def test_source_log_path_names(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, source_id: str, file_name: str
) -> None:
    monkeypatch.setenv("TOOL_HARVESTER_HOME", str(tmp_path))
    assert source_log_path(source_id).name == file_name
