"""Thread-safe timestamp-keyed frame store, one instance per stream."""

import threading
from typing import Callable, Dict, Generic, List, Optional, Tuple, TypeVar

from ..codecs.frame_types import StreamKind

T = TypeVar("T")


class StreamStore(Generic[T]):
    """Maps sensor timestamps to payloads of a single stream kind.

    Lookups are exact-match only. A later ``put`` for an existing timestamp
    overwrites the earlier payload.
    """

    def __init__(self, kind: StreamKind):
        self.kind = kind
        self._frames: Dict[int, T] = {}
        self._lock = threading.RLock()

    def put(self, timestamp: int, payload: T) -> None:
        with self._lock:
            self._frames[int(timestamp)] = payload

    def get(self, timestamp: int) -> Optional[T]:
        with self._lock:
            return self._frames.get(int(timestamp))

    def keys(self) -> List[int]:
        """All stored timestamps, ascending."""
        with self._lock:
            return sorted(self._frames)

    def items(self) -> List[Tuple[int, T]]:
        """Snapshot of (timestamp, payload) pairs, ascending."""
        with self._lock:
            return sorted(self._frames.items())

    def transform(self, func: Callable[[T], T]) -> int:
        """Replace every payload with ``func(payload)``; returns the count."""
        with self._lock:
            for timestamp, payload in list(self._frames.items()):
                self._frames[timestamp] = func(payload)
            return len(self._frames)

    def clear(self) -> None:
        with self._lock:
            self._frames.clear()

    @property
    def is_empty(self) -> bool:
        with self._lock:
            return not self._frames

    def __len__(self) -> int:
        with self._lock:
            return len(self._frames)

    def __contains__(self, timestamp: object) -> bool:
        if not isinstance(timestamp, int):
            return False
        with self._lock:
            return timestamp in self._frames

    def __repr__(self) -> str:
        return f"StreamStore(kind={self.kind.value!r}, frames={len(self)})"
