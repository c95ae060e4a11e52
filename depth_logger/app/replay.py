import argparse
import asyncio
import sys
from pathlib import Path
from typing import Optional

from depth_logger.cli.common import add_common_cli_arguments
from depth_logger.core.logging_config import configure_logging
from depth_logger.core.logging_utils import get_module_logger
from depth_logger.core.paths import SESSION_CONFIG_PATH
from depth_logger.modules.base.preferences import ModulePreferences
from depth_logger.modules.Session.config import SessionConfig
from depth_logger.modules.Session.session_core import (
    LoadResult,
    ResolvedFrame,
    SessionLoader,
    SessionLoadError,
    StreamKind,
    Timeline,
    TimelineIndexError,
    export_frame,
)
from depth_logger.modules.Session.session_core.export import EXPORTABLE_STREAMS


logger = get_module_logger(__name__)

ANCHOR_CHOICES = [kind.value for kind in StreamKind]
EXPORT_CHOICES = [kind.value for kind in EXPORTABLE_STREAMS]


def parse_args(argv: Optional[list[str]] = None) -> argparse.Namespace:
    """Parse command-line arguments; unset options fall back to the config file."""
    parser = argparse.ArgumentParser(
        prog="depth-logger",
        description="Depth Logger - load a recorded session and inspect or export its frames",
    )

    parser.add_argument(
        "session_dir",
        type=Path,
        help="Session directory containing Depth/, Color/, Segmentation/ and Coordinates/",
    )

    position = parser.add_mutually_exclusive_group()
    position.add_argument(
        "--index",
        type=int,
        default=None,
        help="Timeline position to resolve (0-based)",
    )
    position.add_argument(
        "--timestamp",
        type=int,
        default=None,
        help="Sensor timestamp to resolve (must exist on the anchor stream)",
    )

    parser.add_argument(
        "--anchor",
        choices=ANCHOR_CHOICES,
        default=None,
        help="Stream whose timestamps form the timeline (default: depth)",
    )

    parser.add_argument(
        "--export-dir",
        type=Path,
        default=None,
        help="Write the resolved frame as <timestamp>.png into this directory",
    )

    parser.add_argument(
        "--export-stream",
        choices=EXPORT_CHOICES,
        default=None,
        help="Stream to export (default: preview_stream from the config)",
    )

    add_common_cli_arguments(
        parser,
        include_output=False,
        default_log_level=None,
        include_config=True,
        include_session_prefix=False,
        default_console_output=None,
    )

    return parser.parse_args(argv)


def load_config(args: argparse.Namespace) -> SessionConfig:
    config_path = args.config if args.config is not None else SESSION_CONFIG_PATH
    prefs = ModulePreferences(config_path)
    return SessionConfig.from_preferences(prefs.scope(""), args)


def format_summary(result: LoadResult) -> str:
    lines = [f"Session: {result.report.root}"]
    for kind, count in result.recording.frame_counts().items():
        note = " (missing)" if kind in result.report.missing else ""
        lines.append(f"  {kind.value:<15} {count:>6}{note}")
    lines.append(f"  timeline         {len(result.timeline):>6}")
    if result.report.skipped_count:
        lines.append(f"  skipped entries  {result.report.skipped_count:>6}")
    return "\n".join(lines)


def format_resolved(resolved: ResolvedFrame) -> str:
    lines = [f"Position {resolved.index} @ {resolved.timestamp}"]
    for kind in StreamKind:
        frame = resolved.frame_for(kind)
        if frame is None:
            status = "-"
        elif kind in (StreamKind.SKELETON_REAL, StreamKind.SKELETON_DEPTH):
            status = f"{frame.present_count} joints"
        else:
            status = f"{len(frame.payload.data)} bytes"
        lines.append(f"  {kind.value:<15} {status}")
    return "\n".join(lines)


def _select_index(args: argparse.Namespace, timeline: Timeline) -> Optional[int]:
    if args.timestamp is not None:
        index = timeline.index_of(args.timestamp)
        if index is None:
            raise TimelineIndexError(f"Timestamp {args.timestamp} is not on the {timeline.anchor.value} timeline")
        return index
    if args.index is not None:
        return args.index
    if args.export_dir is not None:
        return 0
    return None


async def main(argv: Optional[list[str]] = None) -> int:
    """Load a session, print its summary and optionally resolve/export one position."""
    args = parse_args(argv)
    config = load_config(args)

    configure_logging(
        config.log_level,
        force=True,
        console=config.console_output,
        log_file=args.log_file,
    )

    loader = SessionLoader(
        width=config.frame_width,
        height=config.frame_height,
        color_bytes_per_pixel=config.color_bytes_per_pixel,
    )

    try:
        result = await loader.load_async(args.session_dir)
    except SessionLoadError as exc:
        print(f"Failed to load session: {exc}", file=sys.stderr)
        return 1

    print(format_summary(result))

    timeline = result.timeline
    if config.anchor_stream is not StreamKind.DEPTH:
        if not result.recording.has(config.anchor_stream):
            print(f"Stream {config.anchor_stream.value!r} has no frames", file=sys.stderr)
            return 1
        timeline = Timeline.from_recording(result.recording, config.anchor_stream)
        logger.info("Timeline anchored on %s (%d positions)", config.anchor_stream.value, len(timeline))

    try:
        index = _select_index(args, timeline)
        if index is None:
            return 0
        resolved = timeline.resolve(index)
    except TimelineIndexError as exc:
        print(f"Invalid position: {exc}", file=sys.stderr)
        return 1

    print(format_resolved(resolved))

    if args.export_dir is not None:
        stream = StreamKind(args.export_stream) if args.export_stream else config.preview_stream
        try:
            path = export_frame(resolved, args.export_dir, stream)
        except (OSError, ValueError) as exc:
            logger.error("Export failed: %s", exc)
            print(f"Export failed: {exc}", file=sys.stderr)
            return 1
        if path is None:
            print(f"No {stream.value} frame at {resolved.timestamp}; nothing exported")
        else:
            print(f"Exported {path}")

    return 0


def run(argv: Optional[list[str]] = None) -> int:
    try:
        return asyncio.run(main(argv))
    except KeyboardInterrupt:
        print("\nInterrupted by user")
        return 130


if __name__ == "__main__":
    raise SystemExit(run())
