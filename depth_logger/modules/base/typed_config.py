"""Type coercion helpers for typed module configs built from preferences."""

from __future__ import annotations

from enum import Enum
from pathlib import Path
from typing import Type, TypeVar

from .preferences import ScopedPreferences

E = TypeVar("E", bound=Enum)


def get_pref_str(prefs: ScopedPreferences, key: str, default: str) -> str:
    val = prefs.get(key)
    return str(val) if val is not None else default


def get_pref_int(prefs: ScopedPreferences, key: str, default: int) -> int:
    val = prefs.get(key)
    if val is None:
        return default
    try:
        return int(val)
    except (ValueError, TypeError):
        return default


def get_pref_bool(prefs: ScopedPreferences, key: str, default: bool) -> bool:
    val = prefs.get(key)
    if val is None:
        return default
    if isinstance(val, bool):
        return val
    return str(val).strip().lower() in {"true", "1", "yes", "on"}


def get_pref_path(prefs: ScopedPreferences, key: str, default: Path) -> Path:
    val = prefs.get(key)
    if val is None:
        return default
    text = str(val).strip()
    return Path(text).expanduser() if text else default


def get_pref_enum(prefs: ScopedPreferences, key: str, enum_cls: Type[E], default: E) -> E:
    """Look up an enum member by value (case-insensitive), falling back to ``default``."""
    val = prefs.get(key)
    if val is None:
        return default
    text = str(val).strip().lower()
    for member in enum_cls:
        if str(member.value).lower() == text:
            return member
    return default


__all__ = [
    "get_pref_str",
    "get_pref_int",
    "get_pref_bool",
    "get_pref_path",
    "get_pref_enum",
]
