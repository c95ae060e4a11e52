"""Centralized path constants for the Depth Logger."""

from __future__ import annotations

import os
from pathlib import Path

PROJECT_ROOT = Path(__file__).resolve().parents[2]
PACKAGE_ROOT = PROJECT_ROOT / "depth_logger"

MODULES_DIR = PACKAGE_ROOT / "modules"
SESSION_CONFIG_PATH = MODULES_DIR / "Session" / "config.txt"

# User-specific state (allows running from read-only project directories)
_USER_STATE_ENV = os.environ.get("DEPTH_LOGGER_STATE_DIR")
USER_STATE_DIR = Path(_USER_STATE_ENV).expanduser() if _USER_STATE_ENV else (Path.home() / ".depth_logger")
USER_CONFIG_OVERRIDES_DIR = USER_STATE_DIR / "config_overrides"
USER_LOGS_DIR = USER_STATE_DIR / "logs"


__all__ = [
    'PROJECT_ROOT',
    'PACKAGE_ROOT',
    'MODULES_DIR',
    'SESSION_CONFIG_PATH',
    'USER_STATE_DIR',
    'USER_CONFIG_OVERRIDES_DIR',
    'USER_LOGS_DIR',
]
