"""Session recorder: routes live sensor frames into a Recording.

Color and depth frames are stored as they arrive whether or not recording
is enabled. Segmentation masks and skeleton samples are stored only while
recording is enabled.

Frames reach the recorder either by direct ``on_*`` calls or as typed
events on a :class:`FrameChannel` drained by one consumer thread.
"""

from __future__ import annotations

import threading
from typing import Optional

from depth_logger.core.logging_utils import get_module_logger
from ..codecs.frame_codec import (
    FrameCodecError,
    decode_raw_buffer,
    decode_segmentation,
    mask_from_user_map,
)
from ..codecs.frame_types import PixelBuffer, StreamKind
from ..constants import (
    COLOR_BYTES_PER_PIXEL,
    DEPTH_BYTES_PER_PIXEL,
    FRAME_HEIGHT,
    FRAME_WIDTH,
    USER_MAP_BYTES_PER_PIXEL,
)
from ..storage.recording import Recording
from ..tracking.sensor_types import RawUserFrame, ViewerSink
from ..tracking.skeleton_tracker import SkeletonTracker, TrackingResult
from .events import (
    ColorFrameEvent,
    DepthFrameEvent,
    FrameChannel,
    FrameEvent,
    SegmentationFrameEvent,
    SkeletonFrameEvent,
)


class SessionRecorder:
    """Applies frame events to a :class:`Recording` and the skeleton tracker.

    Example:
        recorder = SessionRecorder(Recording(), SkeletonTracker(sensor))
        channel = FrameChannel()
        recorder.attach(channel)
        recorder.start_recording()

        # Sensor thread
        channel.publish(DepthFrameEvent(ts, data))

        # When done
        recorder.stop_recording()
        recorder.detach()
    """

    def __init__(
        self,
        recording: Recording,
        tracker: SkeletonTracker,
        viewer: Optional[ViewerSink] = None,
        *,
        preview_stream: StreamKind = StreamKind.DEPTH,
        width: int = FRAME_WIDTH,
        height: int = FRAME_HEIGHT,
        color_bytes_per_pixel: int = COLOR_BYTES_PER_PIXEL,
    ):
        self.logger = get_module_logger("SessionRecorder")
        self.recording = recording
        self.tracker = tracker
        self.width = width
        self.height = height
        self.color_bytes_per_pixel = color_bytes_per_pixel
        self.preview_stream = preview_stream

        self._viewer = viewer
        self._recording = False
        self._state_lock = threading.Lock()

        self._channel: Optional[FrameChannel] = None
        self._consumer_thread: Optional[threading.Thread] = None
        self._failed_events = 0

        if viewer is not None:
            tracker.set_viewer(viewer)

    # =========================================================================
    # Recording state
    # =========================================================================

    @property
    def is_recording(self) -> bool:
        return self._recording

    @property
    def failed_events(self) -> int:
        """Events that could not be applied (bad buffer sizes and the like)."""
        return self._failed_events

    def start_recording(self) -> None:
        with self._state_lock:
            if self._recording:
                self.logger.debug("Recording already active")
                return
            self._recording = True
            self.tracker.start_recording()
        self.logger.info("Recording started")

    def stop_recording(self) -> None:
        with self._state_lock:
            if not self._recording:
                return
            self._recording = False
            self.tracker.stop_recording()
        self.logger.info("Recording stopped: %r", self.recording)

    def set_viewer(self, viewer: Optional[ViewerSink]) -> None:
        self._viewer = viewer
        self.tracker.set_viewer(viewer)

    def clear(self) -> None:
        """Drop every stored frame and the tracker history."""
        self.recording.clear()
        self.tracker.clear_history()
        self.logger.debug("Recording cleared")

    # =========================================================================
    # Frame handlers
    # =========================================================================

    def on_color_frame(self, timestamp: int, data: bytes) -> None:
        buffer = decode_raw_buffer(data, self.color_bytes_per_pixel, width=self.width, height=self.height)
        self.recording.color.put(timestamp, buffer)
        self._preview(StreamKind.COLOR, buffer)

    def on_depth_frame(self, timestamp: int, data: bytes) -> None:
        buffer = decode_raw_buffer(data, DEPTH_BYTES_PER_PIXEL, width=self.width, height=self.height)
        self.recording.depth.put(timestamp, buffer)
        self._preview(StreamKind.DEPTH, buffer)

    def on_segmentation_frame(self, timestamp: int, user_map: bytes) -> None:
        if self._viewer is not None:
            self._viewer.set_user_map(
                decode_raw_buffer(user_map, USER_MAP_BYTES_PER_PIXEL, width=self.width, height=self.height)
            )

        if not self._recording:
            return

        mask = mask_from_user_map(user_map)
        self.recording.segmentation.put(
            timestamp, decode_segmentation(mask, width=self.width, height=self.height)
        )

    def on_skeleton_frame(self, frame: RawUserFrame) -> TrackingResult:
        result = self.tracker.process_frame(frame)
        for sample in result.recorded:
            self.recording.put_skeleton(sample)
        for sample in result.recorded_projected:
            self.recording.put_skeleton(sample)
        return result

    def _preview(self, kind: StreamKind, buffer: PixelBuffer) -> None:
        if self._viewer is not None and kind is self.preview_stream:
            self._viewer.set_background(buffer, buffer.width, buffer.height)

    # =========================================================================
    # Event dispatch
    # =========================================================================

    def dispatch(self, event: FrameEvent) -> None:
        if isinstance(event, DepthFrameEvent):
            self.on_depth_frame(event.timestamp, event.data)
        elif isinstance(event, ColorFrameEvent):
            self.on_color_frame(event.timestamp, event.data)
        elif isinstance(event, SegmentationFrameEvent):
            self.on_segmentation_frame(event.timestamp, event.user_map)
        elif isinstance(event, SkeletonFrameEvent):
            self.on_skeleton_frame(event.frame)
        else:
            raise TypeError(f"Unsupported frame event: {type(event).__name__}")

    def attach(self, channel: FrameChannel) -> None:
        """Start the consumer thread that applies events from ``channel``."""
        if self._consumer_thread is not None and self._consumer_thread.is_alive():
            raise RuntimeError("Recorder is already attached to a frame channel")

        self._channel = channel
        self._consumer_thread = threading.Thread(
            target=self._consumer_loop,
            args=(channel,),
            name="SessionRecorder-consumer",
            daemon=True,
        )
        self._consumer_thread.start()
        self.logger.debug("Attached to frame channel")

    def detach(self, timeout: float = 5.0) -> None:
        """Close the attached channel and wait for the backlog to be applied."""
        channel = self._channel
        thread = self._consumer_thread
        if channel is None:
            return

        channel.close()
        if thread is not None and thread.is_alive():
            thread.join(timeout=timeout)
            if thread.is_alive():
                self.logger.error("Consumer thread did not stop in time")

        if channel.dropped > 0:
            self.logger.warning("Frame channel closed with %d dropped events", channel.dropped)

        self._channel = None
        self._consumer_thread = None
        self.logger.debug("Detached from frame channel")

    def _consumer_loop(self, channel: FrameChannel) -> None:
        while True:
            event = channel.get()
            if event is None:
                break
            try:
                self.dispatch(event)
            except (FrameCodecError, TypeError) as exc:
                self._failed_events += 1
                self.logger.warning("Dropping %s: %s", type(event).__name__, exc)


__all__ = ["SessionRecorder"]
