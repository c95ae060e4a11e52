"""Shared preference helpers for module configs."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Optional

from depth_logger.core.config_manager import ConfigManager, get_config_manager
from depth_logger.core.logging_utils import get_module_logger

logger = get_module_logger(__name__)


class ModulePreferences:
    """Lightweight wrapper around ConfigManager for module-specific configs."""

    def __init__(
        self,
        config_path: Path,
        *,
        config_manager: Optional[ConfigManager] = None,
        initial_data: Optional[Dict[str, Any]] = None,
    ) -> None:
        self._config_path = Path(config_path)
        self._manager = config_manager or get_config_manager()
        self._cache: Dict[str, Any] = {}
        if initial_data is not None:
            self._cache = dict(initial_data)
        else:
            self.reload()

    @property
    def config_path(self) -> Path:
        return self._config_path

    def snapshot(self) -> Dict[str, Any]:
        return dict(self._cache)

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._cache.get(key, default)

    def reload(self) -> Dict[str, Any]:
        self._cache = self._manager.read_config(self._config_path)
        logger.debug("Loaded %d preference keys from %s", len(self._cache), self._config_path)
        return self.snapshot()

    async def reload_async(self) -> Dict[str, Any]:
        self._cache = await self._manager.read_config_async(self._config_path)
        return self.snapshot()

    def write_sync(self, updates: Dict[str, Any]) -> bool:
        if not updates:
            return True
        success = self._manager.write_config(self._config_path, updates)
        if success:
            for key, value in updates.items():
                self._cache[key] = ConfigManager._stringify_value(value)
        return success

    def scope(self, prefix: str, *, separator: str = ".") -> "ScopedPreferences":
        """Return a scoped view that automatically prefixes keys."""

        return ScopedPreferences(self, prefix, separator=separator)


class ScopedPreferences:
    """Wrapper around ModulePreferences that automatically prefixes keys."""

    def __init__(self, base: ModulePreferences, prefix: str, *, separator: str = ".") -> None:
        self._base = base
        self._prefix = prefix.strip().rstrip(separator)
        self._separator = separator

    def _qualify(self, key: str) -> str:
        if not self._prefix:
            return key
        if not key:
            return self._prefix
        return f"{self._prefix}{self._separator}{key}"

    def snapshot(self) -> Dict[str, Any]:
        base_snapshot = self._base.snapshot()
        if not self._prefix:
            return base_snapshot
        prefix = f"{self._prefix}{self._separator}"
        return {
            key[len(prefix):]: value
            for key, value in base_snapshot.items()
            if key.startswith(prefix)
        }

    def get(self, key: str, default: Optional[Any] = None) -> Any:
        return self._base.get(self._qualify(key), default)

    def write_sync(self, updates: Dict[str, Any]) -> bool:
        return self._base.write_sync({self._qualify(k): v for k, v in updates.items()})


__all__ = [
    "ModulePreferences",
    "ScopedPreferences",
]
