"""Writes a Recording to the on-disk session layout read by SessionLoader.

Layout::

    <root>/Depth/<ts>.bin
    <root>/Color/<ts>.bin
    <root>/Segmentation/<ts>.bin     1 byte per pixel, 0|1
    <root>/Coordinates/Real.txt
    <root>/Coordinates/Depth.txt
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Tuple

from depth_logger.core.logging_utils import get_module_logger
from ..codecs.frame_codec import format_joint_line, narrow_segmentation
from ..codecs.frame_types import CoordinateSystem, PixelBuffer, StreamKind
from ..constants import (
    COLOR_DIR,
    COORDINATES_DIR,
    DEPTH_COORDINATES_FILE,
    DEPTH_DIR,
    FRAME_FILE_SUFFIX,
    REAL_COORDINATES_FILE,
    SEGMENTATION_DIR,
)
from .recording import Recording
from .stream_store import StreamStore

logger = get_module_logger(__name__)


@dataclass
class WriteReport:
    root: Path
    written: Dict[StreamKind, int] = field(default_factory=dict)
    failed: List[Tuple[Path, str]] = field(default_factory=list)
    # Skeleton samples the single-user coordinate files cannot hold
    unwritten: Dict[StreamKind, int] = field(default_factory=dict)

    @property
    def failed_count(self) -> int:
        return len(self.failed)

    @property
    def ok(self) -> bool:
        return not self.failed


class SessionWriter:
    """Persists recordings; per-file failures are logged and counted, never raised."""

    @staticmethod
    def create_session_dir(output_dir: Path, prefix: str = "session") -> Path:
        """Create ``<output_dir>/<prefix>_<YYYYmmdd_HHMMSS>`` and return it."""
        output_dir = Path(output_dir)
        timestamp = time.strftime("%Y%m%d_%H%M%S")
        session_dir = output_dir / f"{prefix}_{timestamp}"
        session_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Created session directory: %s", session_dir)
        return session_dir

    def write(self, recording: Recording, root: Path) -> WriteReport:
        root = Path(root)
        report = WriteReport(root=root)
        root.mkdir(parents=True, exist_ok=True)

        self._write_buffers(root / DEPTH_DIR, recording.depth, report)
        self._write_buffers(root / COLOR_DIR, recording.color, report)
        self._write_buffers(
            root / SEGMENTATION_DIR,
            recording.segmentation,
            report,
            encode=lambda buf: narrow_segmentation(buf.data),
        )

        coordinates = root / COORDINATES_DIR
        self._write_coordinates(coordinates / REAL_COORDINATES_FILE, recording, CoordinateSystem.REAL_WORLD, report)
        self._write_coordinates(coordinates / DEPTH_COORDINATES_FILE, recording, CoordinateSystem.DEPTH, report)

        if report.failed:
            logger.warning("Session written to %s with %d failed files", root, report.failed_count)
        else:
            logger.info("Session written to %s: %s", root, self._summary(report))
        return report

    @staticmethod
    def _summary(report: WriteReport) -> str:
        return ", ".join(f"{kind.value}={count}" for kind, count in report.written.items())

    def _fail(self, report: WriteReport, path: Path, exc: Exception) -> None:
        logger.warning("Failed to write %s: %s", path, exc)
        report.failed.append((path, str(exc)))

    def _write_buffers(
        self,
        directory: Path,
        store: StreamStore[PixelBuffer],
        report: WriteReport,
        encode=None,
    ) -> None:
        items = store.items()
        if not items:
            return

        try:
            directory.mkdir(parents=True, exist_ok=True)
        except OSError as exc:
            self._fail(report, directory, exc)
            return

        count = 0
        for timestamp, buffer in items:
            path = directory / f"{timestamp}{FRAME_FILE_SUFFIX}"
            data = encode(buffer) if encode is not None else buffer.data
            try:
                path.write_bytes(data)
            except OSError as exc:
                self._fail(report, path, exc)
                continue
            count += 1
        report.written[store.kind] = count

    def _write_coordinates(
        self,
        path: Path,
        recording: Recording,
        system: CoordinateSystem,
        report: WriteReport,
    ) -> None:
        store = recording.skeleton_store(system)
        items = store.items()
        if not items:
            return

        self._count_unwritten(path, recording, system, report)

        lines = [format_joint_line(timestamp, sample.joints) for timestamp, sample in items]
        try:
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text("\n".join(lines) + "\n", encoding="utf-8")
        except OSError as exc:
            self._fail(report, path, exc)
            return
        report.written[store.kind] = len(lines)

    def _count_unwritten(
        self,
        path: Path,
        recording: Recording,
        system: CoordinateSystem,
        report: WriteReport,
    ) -> None:
        """Coordinate files hold one user per timestamp; count the samples left out."""
        combined = recording.skeleton_store(system)
        unwritten = 0
        users = []
        for user_id, store in recording.skeleton_users(system).items():
            missed = 0
            for timestamp, sample in store.items():
                written = combined.get(timestamp)
                if written is None or written.user_id != sample.user_id:
                    missed += 1
            if missed:
                unwritten += missed
                users.append(user_id)

        if unwritten:
            report.unwritten[combined.kind] = unwritten
            logger.warning(
                "%s holds one user per timestamp; %d samples from users %s not written",
                path.name,
                unwritten,
                users,
            )


__all__ = ["SessionWriter", "WriteReport"]
