"""
Logging setup for DocuGenius.

Modules log through ``logging.getLogger(__name__)``; this module only decides
where records go. The console gets a rich handler by default, a log file
can be added with size-based rotation.
"""

import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

from rich.console import Console
from rich.logging import RichHandler

LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")
RECORD_FORMAT = "%(asctime)s %(levelname)-8s %(name)s:%(lineno)d %(message)s"
TIMESTAMP_FORMAT = "%Y-%m-%d %H:%M:%S"
DEFAULT_MAX_BYTES = 5 * 1024 * 1024
DEFAULT_BACKUPS = 3

# Libraries that are chatty at DEBUG while decoding images and fonts.
NOISY_LIBRARIES = ("PIL", "reportlab")


def _level_number(level: str) -> int:
    name = str(level).upper()
    if name not in LOG_LEVELS:
        raise ValueError(f"Unknown log level {level!r}, expected one of {', '.join(LOG_LEVELS)}")
    return getattr(logging, name)


def get_logger(name: str) -> logging.Logger:
    """Return the logger called ``name``; the name must be non-empty."""
    if not isinstance(name, str) or not name:
        raise ValueError("A logger needs a non-empty name")
    return logging.getLogger(name)


def configure_logging(level: str = "INFO", log_file: Optional[str] = None,
                      use_rich: bool = True, max_file_size: int = DEFAULT_MAX_BYTES,
                      backup_count: int = DEFAULT_BACKUPS) -> None:
    """
    Route log records of the whole process.

    Replaces any handlers already on the root logger.

    Args:
        level: Threshold name, one of ``LOG_LEVELS``
        log_file: Also write records to this file (rotated)
        use_rich: Pretty console output; False gives a plain stdout stream
        max_file_size: Rotate the log file after this many bytes
        backup_count: Rotated files kept next to the log file
    """
    threshold = _level_number(level)

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(threshold)

    if use_rich:
        console: logging.Handler = RichHandler(
            console=Console(stderr=True),
            markup=False,
            rich_tracebacks=True,
            show_path=threshold <= logging.DEBUG,
        )
        console.setFormatter(logging.Formatter("%(message)s", datefmt="[%X]"))
    else:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(logging.Formatter(RECORD_FORMAT, datefmt=TIMESTAMP_FORMAT))
    console.setLevel(threshold)
    root.addHandler(console)

    for library in NOISY_LIBRARIES:
        logging.getLogger(library).setLevel(max(threshold, logging.INFO))

    if log_file:
        add_file_handler(root, log_file, level, max_file_size, backup_count)


def add_file_handler(logger: logging.Logger, file_path: str, level: str = "INFO",
                     max_file_size: int = DEFAULT_MAX_BYTES, backup_count: int = DEFAULT_BACKUPS) -> None:
    """
    Attach a rotating file handler to ``logger``.

    Missing parent directories are created.

    Raises:
        ValueError: If ``file_path`` is empty or ``level`` is unknown
    """
    if not isinstance(file_path, str) or not file_path:
        raise ValueError("A log file path is required")
    path = Path(file_path)
    path.parent.mkdir(parents=True, exist_ok=True)

    handler = RotatingFileHandler(path, maxBytes=max_file_size, backupCount=backup_count, encoding="utf-8")
    handler.setLevel(_level_number(level))
    handler.setFormatter(logging.Formatter(RECORD_FORMAT, datefmt=TIMESTAMP_FORMAT))
    logger.addHandler(handler)


def set_log_level(level: str) -> None:
    """Change the threshold of the root logger and every handler on it."""
    threshold = _level_number(level)
    root = logging.getLogger()
    root.setLevel(threshold)
    for handler in root.handlers:
        handler.setLevel(threshold)
