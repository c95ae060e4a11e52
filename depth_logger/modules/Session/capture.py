"""Live capture wiring for the Session module.

Builds the recorder pipeline from a :class:`SessionConfig`: a tracker in the
configured coordinate system, a bounded frame channel and a recorder that
drains it. Stopping writes the captured streams to a new timestamped
directory under ``output_dir``.
"""

from __future__ import annotations

from pathlib import Path
from typing import Optional

from depth_logger.core.logging_utils import LoggerLike, ensure_structured_logger
from .config import SessionConfig
from .session_core import (
    FrameChannel,
    Recording,
    SessionRecorder,
    SessionWriter,
    SkeletonTracker,
    WriteReport,
)
from .session_core.recording import FrameEvent
from .session_core.tracking.sensor_types import SensorSource, ViewerSink


class CaptureSession:
    """One capture run: frames published by the sensor thread, saved on stop.

    Example:
        capture = CaptureSession(config, sensor)
        capture.start()

        # Sensor thread
        capture.publish(DepthFrameEvent(ts, data))

        report = capture.stop()
    """

    def __init__(
        self,
        config: SessionConfig,
        sensor: SensorSource,
        viewer: Optional[ViewerSink] = None,
        *,
        logger: LoggerLike = None,
    ) -> None:
        self.config = config
        self.logger = ensure_structured_logger(logger, fallback_name="Session").getChild("Capture")

        self.recording = Recording()
        self.tracker = SkeletonTracker(sensor, config.coordinate_system)
        self.recorder = SessionRecorder(
            self.recording,
            self.tracker,
            viewer,
            preview_stream=config.preview_stream,
            width=config.frame_width,
            height=config.frame_height,
            color_bytes_per_pixel=config.color_bytes_per_pixel,
        )
        self.channel = FrameChannel(config.channel_capacity)
        self.writer = SessionWriter()

        self.session_dir: Optional[Path] = None
        self._active = False

    @property
    def is_active(self) -> bool:
        return self._active

    def start(self) -> None:
        if self._active:
            self.logger.debug("Capture already running")
            return
        self.recorder.attach(self.channel)
        self.recorder.start_recording()
        self._active = True
        self.logger.info(
            "Capture started (%s skeletons, channel capacity %d)",
            self.config.coordinate_system.value,
            self.config.channel_capacity,
        )

    def publish(self, event: FrameEvent) -> bool:
        """Queue a frame event; False when the channel is full or closed."""
        return self.channel.publish(event)

    def stop(self) -> Optional[WriteReport]:
        """Stop recording, apply the backlog and write the session to disk."""
        if not self._active:
            return None
        self._active = False
        # Backlog is applied while recording is still enabled
        self.recorder.detach()
        self.recorder.stop_recording()

        self.session_dir = SessionWriter.create_session_dir(
            self.config.output_dir, self.config.session_prefix
        )
        report = self.writer.write(self.recording, self.session_dir)
        if self.channel.dropped or self.recorder.failed_events:
            self.logger.warning(
                "Capture saved with %d dropped and %d failed events",
                self.channel.dropped,
                self.recorder.failed_events,
            )
        return report


__all__ = ["CaptureSession"]
