"""Rebuilds a Recording and its canonical timeline from an on-disk session.

Per-entry failures (unreadable file, name without digits, bad buffer
length) are logged and skipped. A missing sub-directory or coordinate file
leaves that stream empty. Anything else aborts the load with a single
:class:`SessionLoadError` that still carries the partially filled Recording.
"""

from __future__ import annotations

import asyncio
import re
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Set, Tuple

from depth_logger.core.logging_utils import get_module_logger
from ..codecs.frame_codec import (
    FrameCodecError,
    decode_raw_buffer,
    decode_segmentation,
    parse_joint_lines,
)
from ..codecs.frame_types import CoordinateSystem, PixelBuffer, SkeletonSample, StreamKind
from ..constants import (
    COLOR_BYTES_PER_PIXEL,
    COLOR_DIR,
    COORDINATES_DIR,
    DEPTH_BYTES_PER_PIXEL,
    DEPTH_COORDINATES_FILE,
    DEPTH_DIR,
    FRAME_HEIGHT,
    FRAME_WIDTH,
    REAL_COORDINATES_FILE,
    SEGMENTATION_CAPTURE_BYTES_PER_PIXEL,
    SEGMENTATION_DIR,
)
from ..timeline import Timeline
from .recording import Recording
from .stream_store import StreamStore

logger = get_module_logger(__name__)

_NON_DIGITS = re.compile(r"[^0-9]")
_MAX_TIMESTAMP = 2**63 - 1


def timestamp_from_name(name: str) -> Optional[int]:
    """Strip every non-digit from ``name`` and parse what is left."""
    digits = _NON_DIGITS.sub("", name)
    if not digits:
        return None
    value = int(digits)
    # Sensor timestamps are signed 64-bit
    if value > _MAX_TIMESTAMP:
        return None
    return value


class SessionLoadError(RuntimeError):
    """Unexpected failure that aborted a load part-way through."""

    def __init__(self, message: str, recording: Recording, report: "LoadReport"):
        super().__init__(message)
        self.recording = recording
        self.report = report


@dataclass
class LoadReport:
    root: Path
    loaded: Dict[StreamKind, int] = field(default_factory=dict)
    skipped: List[Tuple[Path, str]] = field(default_factory=list)
    missing: Set[StreamKind] = field(default_factory=set)

    @property
    def skipped_count(self) -> int:
        return len(self.skipped)


@dataclass
class LoadResult:
    recording: Recording
    timeline: Timeline
    report: LoadReport


class SessionLoader:
    """Loads the Depth/Color/Segmentation/Coordinates layout of one session."""

    def __init__(
        self,
        *,
        width: int = FRAME_WIDTH,
        height: int = FRAME_HEIGHT,
        color_bytes_per_pixel: int = COLOR_BYTES_PER_PIXEL,
    ):
        self.width = width
        self.height = height
        self.color_bytes_per_pixel = color_bytes_per_pixel

    # ------------------------------------------------------------------
    # Public API

    def load(self, root: Path, recording: Optional[Recording] = None) -> LoadResult:
        root = Path(root)
        recording = recording if recording is not None else Recording()
        report = LoadReport(root=root)
        logger.info("Loading session %s", root)

        try:
            if not root.is_dir():
                raise NotADirectoryError(f"Session directory not found: {root}")

            coordinates = root / COORDINATES_DIR
            self._load_coordinates(
                coordinates / DEPTH_COORDINATES_FILE,
                recording,
                CoordinateSystem.DEPTH,
                report,
            )
            self._load_coordinates(
                coordinates / REAL_COORDINATES_FILE,
                recording,
                CoordinateSystem.REAL_WORLD,
                report,
            )

            self._load_buffers(root / DEPTH_DIR, recording.depth, DEPTH_BYTES_PER_PIXEL, report)
            self._load_buffers(root / COLOR_DIR, recording.color, self.color_bytes_per_pixel, report)
            self._load_buffers(
                root / SEGMENTATION_DIR,
                recording.segmentation,
                SEGMENTATION_CAPTURE_BYTES_PER_PIXEL,
                report,
            )
            self._widen_segmentation(recording.segmentation)

            timeline = Timeline.from_recording(recording, StreamKind.DEPTH)
        except Exception as exc:
            logger.error("Session load aborted for %s: %s", root, exc, exc_info=True)
            raise SessionLoadError(f"Failed to load session {root}: {exc}", recording, report) from exc

        logger.info(
            "Loaded session %s: %d timeline positions, %d entries skipped",
            root,
            len(timeline),
            report.skipped_count,
        )
        return LoadResult(recording, timeline, report)

    async def load_async(self, root: Path, recording: Optional[Recording] = None) -> LoadResult:
        """Run :meth:`load` on a worker thread and await its single completion."""
        return await asyncio.to_thread(self.load, root, recording)

    def submit(self, root: Path, recording: Optional[Recording] = None) -> "Future[LoadResult]":
        """Start a background load; the returned future completes exactly once."""
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="SessionLoader")
        try:
            return executor.submit(self.load, root, recording)
        finally:
            executor.shutdown(wait=False)

    # ------------------------------------------------------------------
    # Internal helpers

    def _skip(self, report: LoadReport, path: Path, reason: str) -> None:
        logger.warning("Skipping %s: %s", path, reason)
        report.skipped.append((path, reason))

    def _load_buffers(
        self,
        directory: Path,
        store: StreamStore[PixelBuffer],
        bytes_per_pixel: int,
        report: LoadReport,
    ) -> None:
        if not directory.is_dir():
            logger.info("No %s stream in session (%s missing)", store.kind.value, directory.name)
            report.missing.add(store.kind)
            return

        count = 0
        for entry in sorted(directory.iterdir()):
            if not entry.is_file():
                continue

            timestamp = timestamp_from_name(entry.name)
            if timestamp is None:
                self._skip(report, entry, "name does not yield a timestamp")
                continue

            try:
                data = entry.read_bytes()
            except OSError as exc:
                self._skip(report, entry, f"read failed: {exc}")
                continue

            try:
                payload = decode_raw_buffer(data, bytes_per_pixel, width=self.width, height=self.height)
            except FrameCodecError as exc:
                self._skip(report, entry, str(exc))
                continue

            store.put(timestamp, payload)
            count += 1

        report.loaded[store.kind] = count
        logger.debug("Loaded %d %s frames from %s", count, store.kind.value, directory)

    def _load_coordinates(
        self,
        path: Path,
        recording: Recording,
        system: CoordinateSystem,
        report: LoadReport,
    ) -> None:
        store = recording.skeleton_store(system)
        if not path.is_file():
            logger.info("No %s coordinates in session (%s missing)", system.value, path.name)
            report.missing.add(store.kind)
            return

        try:
            lines = path.read_text(encoding="utf-8").splitlines()
        except (OSError, UnicodeDecodeError) as exc:
            self._skip(report, path, f"read failed: {exc}")
            return

        count = 0
        for timestamp, joints in parse_joint_lines(lines):
            recording.put_skeleton(SkeletonSample(timestamp, joints, system))
            count += 1

        report.loaded[store.kind] = count
        logger.debug("Loaded %d %s skeleton samples from %s", count, system.value, path)

    def _widen_segmentation(self, store: StreamStore[PixelBuffer]) -> None:
        def widen(buf: PixelBuffer) -> PixelBuffer:
            return decode_segmentation(buf.data, width=buf.width, height=buf.height)

        count = store.transform(widen)
        if count:
            logger.debug("Widened %d segmentation masks", count)
