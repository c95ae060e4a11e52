"""Base utilities shared by Depth Logger modules."""

from .preferences import ModulePreferences, ScopedPreferences
from .typed_config import (
    get_pref_bool,
    get_pref_enum,
    get_pref_int,
    get_pref_path,
    get_pref_str,
)

__all__ = [
    "ModulePreferences",
    "ScopedPreferences",
    "get_pref_bool",
    "get_pref_enum",
    "get_pref_int",
    "get_pref_path",
    "get_pref_str",
]
