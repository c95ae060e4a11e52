"""Canonical scrub timeline and per-stream exact-match resolution."""

from __future__ import annotations

from bisect import bisect_left
from dataclasses import dataclass
from typing import List, Optional, Sequence

from .codecs.frame_types import Frame, PixelBuffer, SkeletonSample, StreamKind
from .storage.recording import Recording
from .storage.stream_store import StreamStore


class TimelineIndexError(IndexError):
    """Raised for a scrub position outside ``[0, length())``."""


@dataclass(frozen=True, slots=True)
class ResolvedFrame:
    """Every stream's frame at one timeline position; ``None`` means no frame at that timestamp."""

    index: int
    timestamp: int
    depth: Optional[Frame[PixelBuffer]] = None
    color: Optional[Frame[PixelBuffer]] = None
    segmentation: Optional[Frame[PixelBuffer]] = None
    skeleton: Optional[SkeletonSample] = None
    skeleton_depth: Optional[SkeletonSample] = None

    def frame_for(self, kind: StreamKind):
        return {
            StreamKind.DEPTH: self.depth,
            StreamKind.COLOR: self.color,
            StreamKind.SEGMENTATION: self.segmentation,
            StreamKind.SKELETON_REAL: self.skeleton,
            StreamKind.SKELETON_DEPTH: self.skeleton_depth,
        }[kind]


class Timeline:
    """Ordered, strictly increasing timestamps taken from one anchor stream.

    The canonical timeline is anchored on the depth stream. Other anchors
    exist so a viewer can step through, say, only the color frames.
    """

    def __init__(
        self,
        recording: Recording,
        timestamps: Sequence[int],
        anchor: StreamKind = StreamKind.DEPTH,
    ):
        self._recording = recording
        self._timestamps: List[int] = sorted(set(int(t) for t in timestamps))
        self.anchor = anchor

    @classmethod
    def from_recording(cls, recording: Recording, anchor: StreamKind = StreamKind.DEPTH) -> "Timeline":
        return cls(recording, recording.store(anchor).keys(), anchor)

    @property
    def timestamps(self) -> List[int]:
        return list(self._timestamps)

    def length(self) -> int:
        return len(self._timestamps)

    def __len__(self) -> int:
        return len(self._timestamps)

    def timestamp_at(self, index: int) -> int:
        if index < 0 or index >= len(self._timestamps):
            raise TimelineIndexError(f"Timeline index {index} out of range [0, {len(self._timestamps)})")
        return self._timestamps[index]

    def index_of(self, timestamp: int) -> Optional[int]:
        """Position of an exact timestamp, or None if the anchor has no such frame."""
        pos = bisect_left(self._timestamps, timestamp)
        if pos < len(self._timestamps) and self._timestamps[pos] == timestamp:
            return pos
        return None

    @staticmethod
    def _lookup(store: StreamStore[PixelBuffer], timestamp: int) -> Optional[Frame[PixelBuffer]]:
        payload = store.get(timestamp)
        return Frame(timestamp, payload) if payload is not None else None

    def resolve(self, index: int) -> ResolvedFrame:
        timestamp = self.timestamp_at(index)
        rec = self._recording
        return ResolvedFrame(
            index=index,
            timestamp=timestamp,
            depth=self._lookup(rec.depth, timestamp),
            color=self._lookup(rec.color, timestamp),
            segmentation=self._lookup(rec.segmentation, timestamp),
            skeleton=rec.skeleton_real.get(timestamp),
            skeleton_depth=rec.skeleton_depth.get(timestamp),
        )

    def __repr__(self) -> str:
        return f"Timeline(anchor={self.anchor.value!r}, length={len(self)})"
