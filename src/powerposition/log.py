"""Process logging setup: console plus a daily rolling file."""

from __future__ import annotations

import logging
from logging.handlers import TimedRotatingFileHandler
from pathlib import Path

LOGGER_NAME = "powerposition"
LOG_FILENAME = "log.txt"

CONSOLE_FORMAT = "%(asctime)s [%(levelname).3s] %(message)s"
CONSOLE_DATEFMT = "%H:%M:%S"
FILE_FORMAT = "%(asctime)s [%(levelname).3s] %(message)s"
FILE_DATEFMT = "%Y-%m-%d %H:%M:%S"


def configure_logging(
    log_dir: Path | str | None = "logs",
    level: int | str = logging.INFO,
) -> logging.Logger:
    """Attach console and file handlers to the package logger and return it.

    Args:
        log_dir: Directory for ``log.txt`` (rolled at midnight). ``None``
            disables the file handler.
        level: Logging level for the logger and its handlers.

    Calling again returns the already-configured logger unchanged.
    """
    logger = logging.getLogger(LOGGER_NAME)
    if logger.handlers:
        return logger

    logger.setLevel(level)
    logger.propagate = False

    console_handler = logging.StreamHandler()
    console_handler.setLevel(level)
    console_handler.setFormatter(logging.Formatter(CONSOLE_FORMAT, datefmt=CONSOLE_DATEFMT))
    logger.addHandler(console_handler)

    if log_dir is not None:
        log_path = Path(log_dir)
        log_path.mkdir(parents=True, exist_ok=True)
        file_handler = TimedRotatingFileHandler(
            log_path / LOG_FILENAME, when="midnight", encoding="utf-8",
        )
        file_handler.setLevel(level)
        file_handler.setFormatter(logging.Formatter(FILE_FORMAT, datefmt=FILE_DATEFMT))
        logger.addHandler(file_handler)

    return logger
