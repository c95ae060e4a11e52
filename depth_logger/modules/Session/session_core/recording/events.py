"""Typed frame events and the bounded channel that carries them to the recorder.

The sensor thread publishes one event per delivered frame; the recorder's
consumer thread drains them in arrival order. ``None`` on the queue is the
stop sentinel.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass
from queue import Empty, Full, Queue
from typing import Optional, Union

from depth_logger.core.logging_utils import get_module_logger
from ..constants import DEFAULT_CHANNEL_CAPACITY
from ..tracking.sensor_types import RawUserFrame

logger = get_module_logger(__name__)


@dataclass(frozen=True, slots=True)
class ColorFrameEvent:
    timestamp: int
    data: bytes


@dataclass(frozen=True, slots=True)
class DepthFrameEvent:
    timestamp: int
    data: bytes


@dataclass(frozen=True, slots=True)
class SegmentationFrameEvent:
    """``user_map`` is the sensor's 16-bit per-pixel user id map."""

    timestamp: int
    user_map: bytes


@dataclass(frozen=True, slots=True)
class SkeletonFrameEvent:
    frame: RawUserFrame

    @property
    def timestamp(self) -> int:
        return self.frame.timestamp


FrameEvent = Union[ColorFrameEvent, DepthFrameEvent, SegmentationFrameEvent, SkeletonFrameEvent]


class FrameChannel:
    """Bounded single-consumer queue of frame events.

    Publishing never blocks the producer: when the queue is full the event is
    dropped and counted.
    """

    def __init__(self, capacity: int = DEFAULT_CHANNEL_CAPACITY):
        self._queue: Queue[Optional[FrameEvent]] = Queue(maxsize=max(1, capacity))
        self._dropped = 0
        self._closed = False
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._queue.maxsize

    @property
    def dropped(self) -> int:
        """Number of events dropped due to queue overflow."""
        return self._dropped

    @property
    def closed(self) -> bool:
        return self._closed

    def publish(self, event: FrameEvent) -> bool:
        """Queue an event. Returns False if the channel is closed or full."""
        if self._closed:
            return False
        try:
            self._queue.put_nowait(event)
            return True
        except Full:
            with self._lock:
                self._dropped += 1
                dropped = self._dropped
            if dropped % 50 == 1:
                logger.warning("Frame channel overflow (dropped: %d)", dropped)
            return False

    def get(self, timeout: Optional[float] = None) -> Optional[FrameEvent]:
        """Block for the next event; ``None`` means the channel was closed.

        Raises ``queue.Empty`` when ``timeout`` elapses first.
        """
        return self._queue.get(timeout=timeout)

    def close(self) -> None:
        """Stop accepting events and wake the consumer once the backlog drains."""
        if self._closed:
            return
        self._closed = True
        # The sentinel must get through even when the queue is full
        try:
            self._queue.put(None, timeout=5.0)
        except Full:
            logger.error("Frame channel consumer did not drain in time; sentinel not delivered")

    def drain(self) -> int:
        """Discard every queued event without processing it."""
        count = 0
        while True:
            try:
                item = self._queue.get_nowait()
            except Empty:
                return count
            if item is not None:
                count += 1


__all__ = [
    "ColorFrameEvent",
    "DepthFrameEvent",
    "FrameChannel",
    "FrameEvent",
    "SegmentationFrameEvent",
    "SkeletonFrameEvent",
]
