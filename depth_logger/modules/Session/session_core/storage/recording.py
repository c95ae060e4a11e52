"""In-memory aggregate of every stream captured in one session."""

from __future__ import annotations

import threading
from typing import Dict, List

from ..codecs.frame_types import CoordinateSystem, PixelBuffer, SkeletonSample, StreamKind
from .stream_store import StreamStore

# Samples loaded from disk carry no user id.
ANONYMOUS_USER = 0


class Recording:
    """Color, depth and segmentation buffers plus both skeleton coordinate streams.

    Skeleton samples are kept per user and per coordinate system.
    ``skeleton_real`` and ``skeleton_depth`` are the combined per-timestamp
    views used by the timeline and the single-file coordinate layout; when
    several users share a timestamp they hold the lowest user id.

    A Recording is filled either by the live recorder or by the loader, never
    both. Opening a new session means building a new Recording.
    """

    def __init__(self) -> None:
        self.color: StreamStore[PixelBuffer] = StreamStore(StreamKind.COLOR)
        self.depth: StreamStore[PixelBuffer] = StreamStore(StreamKind.DEPTH)
        self.segmentation: StreamStore[PixelBuffer] = StreamStore(StreamKind.SEGMENTATION)
        self.skeleton_real: StreamStore[SkeletonSample] = StreamStore(StreamKind.SKELETON_REAL)
        self.skeleton_depth: StreamStore[SkeletonSample] = StreamStore(StreamKind.SKELETON_DEPTH)

        self._skeleton_users: Dict[CoordinateSystem, Dict[int, StreamStore[SkeletonSample]]] = {
            CoordinateSystem.REAL_WORLD: {},
            CoordinateSystem.DEPTH: {},
        }
        self._skeleton_lock = threading.RLock()

    @property
    def stores(self) -> Dict[StreamKind, StreamStore]:
        return {
            StreamKind.COLOR: self.color,
            StreamKind.DEPTH: self.depth,
            StreamKind.SEGMENTATION: self.segmentation,
            StreamKind.SKELETON_REAL: self.skeleton_real,
            StreamKind.SKELETON_DEPTH: self.skeleton_depth,
        }

    def store(self, kind: StreamKind) -> StreamStore:
        return self.stores[kind]

    def skeleton_store(self, system: CoordinateSystem) -> StreamStore[SkeletonSample]:
        if system is CoordinateSystem.DEPTH:
            return self.skeleton_depth
        return self.skeleton_real

    # ------------------------------------------------------------------
    # Per-user skeletons

    def store_for(
        self,
        user_id: int,
        system: CoordinateSystem = CoordinateSystem.REAL_WORLD,
    ) -> StreamStore[SkeletonSample]:
        """Return (creating on first use) the skeleton store of one user."""
        with self._skeleton_lock:
            users = self._skeleton_users[system]
            store = users.get(user_id)
            if store is None:
                store = StreamStore(self.skeleton_store(system).kind)
                users[user_id] = store
            return store

    def skeleton_users(
        self, system: CoordinateSystem = CoordinateSystem.REAL_WORLD
    ) -> Dict[int, StreamStore[SkeletonSample]]:
        with self._skeleton_lock:
            return dict(sorted(self._skeleton_users[system].items()))

    def put_skeleton(self, sample: SkeletonSample) -> None:
        """Store ``sample`` for its user and update the combined view."""
        user_id = sample.user_id if sample.user_id is not None else ANONYMOUS_USER
        system = sample.coordinate_system
        with self._skeleton_lock:
            self.store_for(user_id, system).put(sample.timestamp, sample)

            combined = self.skeleton_store(system)
            current = combined.get(sample.timestamp)
            if current is None or _user_key(current) >= user_id:
                combined.put(sample.timestamp, sample)

    # ------------------------------------------------------------------

    def has(self, kind: StreamKind) -> bool:
        """A stream is available once it holds at least one frame."""
        return not self.store(kind).is_empty

    def available_streams(self) -> List[StreamKind]:
        return [kind for kind, store in self.stores.items() if not store.is_empty]

    def frame_counts(self) -> Dict[StreamKind, int]:
        return {kind: len(store) for kind, store in self.stores.items()}

    def clear(self) -> None:
        with self._skeleton_lock:
            for store in self.stores.values():
                store.clear()
            for users in self._skeleton_users.values():
                users.clear()

    def __repr__(self) -> str:
        counts = ", ".join(f"{kind.value}={count}" for kind, count in self.frame_counts().items())
        return f"Recording({counts})"


def _user_key(sample: SkeletonSample) -> int:
    return sample.user_id if sample.user_id is not None else ANONYMOUS_USER
