"""Logging utilities for docdedupe runs."""

from __future__ import annotations

import logging
from datetime import datetime
from pathlib import Path

_LOGGER_NAME = "docdedupe"

LEVELS = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


def get_logger(name: str | None = None) -> logging.Logger:
    """Return a module-scoped logger under the docdedupe hierarchy."""
    full_name = f"{_LOGGER_NAME}.{name}" if name else _LOGGER_NAME
    return logging.getLogger(full_name)


def default_log_path(directory: Path | None = None) -> Path:
    """Return a timestamped log file path, one per run."""
    stamp = datetime.now().strftime("%Y%m%d-%H%M%S")
    return (directory or Path.cwd()) / f"docdedupe-{stamp}.log"


def configure_logging(
    *,
    level: str = "info",
    verbose: bool = False,
    log_file: Path | None = None,
) -> logging.Logger:
    """Configure the docdedupe logger with console output and optional file sink."""
    if verbose:
        resolved = logging.DEBUG
    else:
        try:
            resolved = LEVELS[level.lower()]
        except KeyError:
            raise ValueError(f"Unknown log level: {level}") from None

    logger = logging.getLogger(_LOGGER_NAME)
    logger.setLevel(resolved)
    logger.propagate = False

    # Reset handlers to avoid duplicate output when the CLI is invoked multiple times.
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    stream_handler = logging.StreamHandler()
    stream_handler.setLevel(resolved)
    stream_handler.setFormatter(logging.Formatter("[docdedupe] %(levelname)s %(message)s"))
    logger.addHandler(stream_handler)

    if log_file is not None:
        log_file.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(log_file, encoding="utf-8")
        file_handler.setLevel(resolved)
        file_handler.setFormatter(
            logging.Formatter("%(asctime)s %(levelname)s %(name)s [%(threadName)s]: %(message)s")
        )
        logger.addHandler(file_handler)

    return logger


__all__ = ["LEVELS", "configure_logging", "default_log_path", "get_logger"]
