from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Optional


LOG_LEVELS: dict[str, int] = {
    "critical": logging.CRITICAL,
    "error": logging.ERROR,
    "warning": logging.WARNING,
    "info": logging.INFO,
    "debug": logging.DEBUG,
}


def add_common_cli_arguments(
    parser: argparse.ArgumentParser,
    *,
    include_output: bool = True,
    default_output: Optional[Path | str] = None,
    default_log_level: Optional[str] = "info",
    include_config: bool = False,
    include_session_prefix: bool = True,
    default_session_prefix: Optional[str] = "session",
    include_console_control: bool = True,
    default_console_output: Optional[bool] = False,
) -> None:
    """Register the output/logging/config options shared by every entry point.

    Passing ``None`` as a default leaves the option unset so values from the
    module config file take precedence unless given on the command line.
    """
    if include_output:
        parser.add_argument(
            "--output-dir",
            type=Path,
            default=Path(default_output) if default_output is not None else None,
            help="Directory where recordings or artifacts will be stored",
        )

    parser.add_argument(
        "--log-level",
        choices=sorted(LOG_LEVELS.keys()),
        default=default_log_level,
        help="Logging verbosity",
    )

    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        help="Optional path to write structured logs",
    )

    if include_config:
        parser.add_argument(
            "--config",
            type=Path,
            default=None,
            help="Optional configuration file that overrides the module defaults",
        )

    if include_session_prefix:
        parser.add_argument(
            "--session-prefix",
            type=str,
            default=default_session_prefix,
            help="Prefix for generated session directories",
        )

    if include_console_control:
        console_group = parser.add_mutually_exclusive_group()
        console_group.add_argument(
            "--console",
            dest="console_output",
            action="store_true",
            default=default_console_output,
            help="Also log to console (in addition to file)",
        )
        console_group.add_argument(
            "--no-console",
            dest="console_output",
            action="store_false",
            help="Log to file only (no console output)",
        )


__all__ = ["LOG_LEVELS", "add_common_cli_arguments"]
