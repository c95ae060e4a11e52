"""Typed configuration for the Session module."""

from __future__ import annotations

from dataclasses import asdict, dataclass, field
from pathlib import Path
from typing import Any

from depth_logger.modules.base.preferences import ScopedPreferences
from depth_logger.modules.base.typed_config import (
    get_pref_bool,
    get_pref_enum,
    get_pref_int,
    get_pref_path,
    get_pref_str,
)
from .session_core.codecs.frame_types import CoordinateSystem, StreamKind
from .session_core.constants import (
    COLOR_BYTES_PER_PIXEL,
    DEFAULT_CHANNEL_CAPACITY,
    FRAME_HEIGHT,
    FRAME_WIDTH,
)


@dataclass(slots=True)
class SessionConfig:
    """Typed configuration for the Session module."""

    # Output settings
    output_dir: Path = field(default_factory=lambda: Path("sessions"))
    session_prefix: str = "session"
    log_level: str = "info"
    console_output: bool = True

    # Capture settings
    coordinate_system: CoordinateSystem = CoordinateSystem.REAL_WORLD
    frame_width: int = FRAME_WIDTH
    frame_height: int = FRAME_HEIGHT
    color_bytes_per_pixel: int = COLOR_BYTES_PER_PIXEL
    channel_capacity: int = DEFAULT_CHANNEL_CAPACITY

    # Playback settings
    preview_stream: StreamKind = StreamKind.DEPTH
    anchor_stream: StreamKind = StreamKind.DEPTH

    @classmethod
    def from_preferences(
        cls, prefs: ScopedPreferences, args: Any = None
    ) -> "SessionConfig":
        """Build config from preferences with optional CLI overrides."""
        defaults = cls()

        config = cls(
            # Output settings
            output_dir=get_pref_path(prefs, "output_dir", defaults.output_dir),
            session_prefix=get_pref_str(prefs, "session_prefix", defaults.session_prefix),
            log_level=get_pref_str(prefs, "log_level", defaults.log_level),
            console_output=get_pref_bool(prefs, "console_output", defaults.console_output),
            # Capture settings
            coordinate_system=get_pref_enum(
                prefs, "coordinate_system", CoordinateSystem, defaults.coordinate_system
            ),
            frame_width=get_pref_int(prefs, "frame_width", defaults.frame_width),
            frame_height=get_pref_int(prefs, "frame_height", defaults.frame_height),
            color_bytes_per_pixel=get_pref_int(prefs, "color_bytes_per_pixel", defaults.color_bytes_per_pixel),
            channel_capacity=get_pref_int(prefs, "channel_capacity", defaults.channel_capacity),
            # Playback settings
            preview_stream=get_pref_enum(prefs, "preview_stream", StreamKind, defaults.preview_stream),
            anchor_stream=get_pref_enum(prefs, "anchor_stream", StreamKind, defaults.anchor_stream),
        )

        # Apply CLI argument overrides if provided
        if args is not None:
            config = config._apply_args_override(args)

        return config

    def _apply_args_override(self, args: Any) -> "SessionConfig":
        """Apply CLI argument overrides to config values."""
        values = asdict(self)

        arg_mappings = {
            "output_dir": "output_dir",
            "session_prefix": "session_prefix",
            "log_level": "log_level",
            "console_output": "console_output",
            "anchor": "anchor_stream",
            "coordinate_system": "coordinate_system",
        }

        for arg_name, config_key in arg_mappings.items():
            if hasattr(args, arg_name):
                val = getattr(args, arg_name)
                if val is not None:
                    values[config_key] = val

        # CLI passes enum values as plain strings
        values["anchor_stream"] = StreamKind(values["anchor_stream"])
        values["coordinate_system"] = CoordinateSystem(values["coordinate_system"])
        values["output_dir"] = Path(values["output_dir"])

        return SessionConfig(**values)

    def to_dict(self) -> dict[str, Any]:
        """Export config values as dictionary."""
        values = asdict(self)
        for key, val in values.items():
            if isinstance(val, (StreamKind, CoordinateSystem)):
                values[key] = val.value
            elif isinstance(val, Path):
                values[key] = str(val)
        return values


__all__ = ["SessionConfig"]
