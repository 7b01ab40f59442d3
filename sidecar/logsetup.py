"""Diagnostic logging for sidecar.

stdout belongs to the dashboard, so log records only ever go to a file.
With no file configured the ``sidecar`` logger is silenced.
"""

from __future__ import annotations

import logging
from pathlib import Path

LOGGER_NAME = "sidecar"


def setup_logging(log_file: str | Path | None, level: str | int = logging.INFO) -> logging.Logger:
    """Configure and return the package logger.

    Args:
        log_file: File to append records to. Empty or None disables output.
        level: Level name ("DEBUG", "INFO", ...) or number.

    Returns:
        The ``sidecar`` logger.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if isinstance(level, str):
        level = logging.getLevelName(level.upper())
        if not isinstance(level, int):
            level = logging.INFO
    logger.setLevel(level)

    # Remove existing handlers to avoid duplicates
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()

    if log_file:
        path = Path(log_file).expanduser()
        path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = logging.FileHandler(path, mode="a", encoding="utf-8")
        file_handler.setFormatter(
            logging.Formatter(
                fmt="%(asctime)s [%(levelname)s] %(name)s - %(message)s",
                datefmt="%Y-%m-%d %H:%M:%S",
            )
        )
        logger.addHandler(file_handler)
    else:
        logger.addHandler(logging.NullHandler())

    # Never fall through to a root handler writing on the dashboard
    logger.propagate = False
    return logger
