"""Logging for harvest runs: structlog events rendered as JSON by stdlib handlers.

Every run writes to the console, ``logs/harvester.log`` and ``logs/error.log``.
Each scraping source also gets ``logs/sources/<id>.log`` so that a
single directory can be followed on its own.
"""

from __future__ import annotations

import logging
import logging.config
import os
import re
from pathlib import Path

import structlog

_LOGGING_INITIALISED = False

# Source ids are user-editable in sources.yaml; only these survive in file names.
_UNSAFE_NAME_CHARS = re.compile(r"[^A-Za-z0-9_-]+")

# Per-request INFO noise; the fetcher logs failed attempts itself.
_QUIET_LIBRARIES = ("httpx", "httpcore", "apscheduler.executors.default")


def _default_log_dir() -> Path:
    env_root = os.environ.get("TOOL_HARVESTER_HOME")
    if env_root:
        return Path(env_root).expanduser().resolve() / "logs"
    return Path(__file__).resolve().parents[1] / "logs"


def _safe_log_name(source_id: str) -> str:
    cleaned = _UNSAFE_NAME_CHARS.sub("_", source_id or "").strip("_")
    return cleaned or "source"


def source_log_path(source_id: str) -> Path:
    """File that collects events for ``source_id``, always inside ``logs/sources``."""

    return _default_log_dir() / "sources" / f"{_safe_log_name(source_id)}.log"


def configure_logging(verbose: bool = False) -> structlog.BoundLogger:
    """Install the JSON handlers once and return the ``tool_harvester`` logger."""

    global _LOGGING_INITIALISED
    log_dir = _default_log_dir()
    error_log = log_dir / "error.log"
    harvester_log = log_dir / "harvester.log"
    (log_dir / "sources").mkdir(parents=True, exist_ok=True)
    error_log.touch(exist_ok=True)
    harvester_log.touch(exist_ok=True)

    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else "INFO"
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": "pythonjsonlogger.json.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": level,
                        "formatter": "json",
                    },
                    "harvester_file": {
                        "class": "logging.FileHandler",
                        "level": "INFO",
                        "filename": str(harvester_log),
                        "formatter": "json",
                        "encoding": "utf-8",
                    },
                    "error_file": {
                        "class": "logging.FileHandler",
                        "level": "ERROR",
                        "filename": str(error_log),
                        "formatter": "json",
                        "encoding": "utf-8",
                    },
                },
                "loggers": {
                    "tool_harvester": {
                        "handlers": ["console", "harvester_file", "error_file"],
                        "level": level,
                        "propagate": False,
                    },
                    **{name: {"level": "WARNING"} for name in _QUIET_LIBRARIES},
                },
            }
        )

        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger("tool_harvester")


def source_logger(source_id: str, verbose: bool = False) -> structlog.BoundLogger:
    """Logger bound to ``source=<id>`` that also writes to the source's own file.

    Ids are reduced to a safe name for both the file and the stdlib logger, so
    an id such as ``../etc/x`` or ``a.b`` can neither escape ``logs/sources``
    nor nest under another source's logger.
    """

    configure_logging(verbose)
    log_path = source_log_path(source_id)
    logger_name = f"tool_harvester.source.{_safe_log_name(source_id)}"
    py_logger = logging.getLogger(logger_name)
    if not any(
        isinstance(handler, logging.FileHandler) and handler.baseFilename == str(log_path)
        for handler in py_logger.handlers
    ):
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_path, encoding="utf-8")
        global_logger = logging.getLogger("tool_harvester")
        if global_logger.handlers:
            file_handler.setFormatter(global_logger.handlers[0].formatter)
        file_handler.setLevel(logging.INFO)
        py_logger.addHandler(file_handler)

    return structlog.get_logger(logger_name).bind(source=source_id)


__all__ = ["configure_logging", "source_log_path", "source_logger"]
