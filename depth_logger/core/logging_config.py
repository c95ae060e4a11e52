"""Root logging setup for the depth-logger command."""

from __future__ import annotations

import contextlib
import logging
import sys
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional, Union

from .paths import USER_LOGS_DIR

LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
LOG_DATEFMT = "%Y-%m-%d %H:%M:%S"
LOG_FILE_NAME = "depth_logger.log"
_MAX_BYTES = 500 * 1024
_BACKUP_COUNT = 2

# Pillow logs every PNG chunk at DEBUG during export
_NOISY_LOGGERS = ("PIL",)


def _coerce_level(level: Union[int, str]) -> int:
    if isinstance(level, str):
        name = level.upper()
        if not hasattr(logging, name):
            raise ValueError(f"Unknown log level '{level}'")
        return getattr(logging, name)
    return int(level)


def default_log_file() -> Path:
    return USER_LOGS_DIR / LOG_FILE_NAME


def configure_logging(
    level: Union[int, str] = logging.INFO,
    *,
    force: bool = False,
    console: bool = True,
    log_file: Optional[Union[str, Path]] = None,
) -> Optional[Path]:
    """Install the console and rotating file handlers on the root logger.

    With console output disabled and no ``log_file`` given, logs go to
    ``default_log_file()`` under the per-user state directory.

    Returns:
        The log file in use, or None when logging only to the console.
    """
    numeric_level = _coerce_level(level)
    root = logging.getLogger()

    if root.handlers and not force:
        root.setLevel(numeric_level)
        return None

    for handler in list(root.handlers):
        root.removeHandler(handler)
        with contextlib.suppress(Exception):
            handler.close()

    formatter = logging.Formatter(fmt=LOG_FORMAT, datefmt=LOG_DATEFMT)

    if console:
        stream_handler = logging.StreamHandler(sys.stdout)
        stream_handler.setFormatter(formatter)
        root.addHandler(stream_handler)

    log_path: Optional[Path] = None
    if log_file is not None:
        log_path = Path(log_file)
    elif not console:
        log_path = default_log_file()

    if log_path is not None:
        log_path.parent.mkdir(parents=True, exist_ok=True)
        file_handler = RotatingFileHandler(
            log_path,
            maxBytes=_MAX_BYTES,
            backupCount=_BACKUP_COUNT,
            encoding="utf-8",
        )
        file_handler.setFormatter(formatter)
        root.addHandler(file_handler)

    root.setLevel(numeric_level)

    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(numeric_level, logging.INFO))

    return log_path


__all__ = ["configure_logging", "default_log_file", "LOG_FORMAT", "LOG_DATEFMT"]
