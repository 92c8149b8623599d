"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

import structlog

_LOGGING_INITIALISED = False
_LOG_DIR: Path | None = None

LOGGER_NAME = "throttled_fetch"


def _default_log_dir() -> Path:
    return Path.cwd() / "logs"


def current_log_dir() -> Path:
    return _LOG_DIR or _default_log_dir()


def configure_logging(verbose: bool = False, log_dir: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return application logger.

    Handlers are installed once per process; later calls only return the logger.
    """

    global _LOGGING_INITIALISED, _LOG_DIR
    if not _LOGGING_INITIALISED:
        directory = log_dir or _default_log_dir()
        directory.mkdir(parents=True, exist_ok=True)
        fetch_log = directory / "fetch.log"
        error_log = directory / "error.log"
        level = "DEBUG" if verbose else "INFO"
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "plain": {
                        "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": {
                    "console": {
                        "class": "logging.StreamHandler",
                        "level": "WARNING" if not verbose else "DEBUG",
                        "formatter": "plain",
                    },
                    "fetch_file": {
                        "class": "logging.FileHandler",
                        "level": level,
                        "filename": str(fetch_log),
                        "formatter": "plain",
                        "encoding": "utf-8",
                    },
                    "error_file": {
                        "class": "logging.FileHandler",
                        "level": "ERROR",
                        "filename": str(error_log),
                        "formatter": "plain",
                        "encoding": "utf-8",
                    },
                },
                "loggers": {
                    LOGGER_NAME: {
                        "handlers": ["console", "fetch_file", "error_file"],
                        "level": level,
                        "propagate": False,
                    },
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
                # JSON rendering happens in the stdlib handler formatter
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOG_DIR = directory
        _LOGGING_INITIALISED = True
    return structlog.get_logger(LOGGER_NAME)


def tail_log(path: Path, line_count: int = 100) -> list[str]:
    """Return the last N lines from a log file."""

    if not path.exists():
        return []
    with path.open("r", encoding="utf-8", errors="ignore") as stream:
        lines = stream.readlines()
    return lines[-line_count:]


__all__ = ["LOGGER_NAME", "configure_logging", "current_log_dir", "tail_log"]
