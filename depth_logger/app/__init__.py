"""Application entrypoints for Depth Logger."""

from .replay import main, parse_args, run

__all__ = ["main", "parse_args", "run"]
