"""Logging utilities for the launch readiness CLI."""

from __future__ import annotations

import logging
import logging.config
import sys
from contextlib import contextmanager
from pathlib import Path
from types import TracebackType
from typing import Iterator, Optional

from rich.console import Console
from rich.progress import Progress, SpinnerColumn, TextColumn

LOGGER_NAME = "LaunchReadiness.cli"


def configure_logging(log_path: Optional[Path], log_format: str, verbose: bool) -> logging.Logger:
    formatter = "json" if log_format == "json" else "text"
    handlers: dict[str, dict[str, object]] = {
        "console": {
            "class": "logging.StreamHandler",
            "stream": sys.stderr,
            "formatter": formatter,
            "level": "DEBUG" if verbose else "WARNING",
        }
    }
    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers["file"] = {
            "class": "logging.FileHandler",
            "filename": str(log_path),
            "mode": "a",
            "encoding": "utf-8",
            "formatter": formatter,
        }

    formatters = {
        "text": {
            "format": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
        "json": {
            "()": "pythonjsonlogger.jsonlogger.JsonFormatter",
            "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
        },
    }

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": formatters,
            "handlers": handlers,
            "loggers": {
                LOGGER_NAME: {
                    "handlers": list(handlers.keys()),
                    "level": "DEBUG" if verbose else "INFO",
                    "propagate": False,
                }
            },
            "root": {
                "level": "DEBUG" if verbose else "INFO",
                "handlers": list(handlers.keys()),
            },
        }
    )
    logger = logging.getLogger(LOGGER_NAME)
    logger.debug(
        "Logging configured",
        extra={"log_path": str(log_path) if log_path else None, "log_format": log_format},
    )
    return logger


def install_excepthook(logger: logging.Logger) -> None:
    """Log uncaught exceptions before the interpreter exits with a failure status."""

    def _hook(
        exc_type: type[BaseException],
        exc: BaseException,
        traceback: Optional[TracebackType],
    ) -> None:
        if issubclass(exc_type, KeyboardInterrupt):
            sys.__excepthook__(exc_type, exc, traceback)
            return
        logger.critical("cli.uncaught_exception", exc_info=(exc_type, exc, traceback))

    sys.excepthook = _hook


@contextmanager
def progress_spinner(message: str) -> Iterator[Progress]:
    console = Console(stderr=True)
    progress = Progress(
        SpinnerColumn(),
        TextColumn("{task.description}"),
        transient=True,
        console=console,
    )
    task_id = progress.add_task(message)
    with progress:
        yield progress
    progress.update(task_id, completed=1)


__all__ = ["LOGGER_NAME", "configure_logging", "install_excepthook", "progress_spinner"]
