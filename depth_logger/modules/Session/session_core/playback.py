"""Non-GUI core of the session scrubber.

Holds a loaded Recording and a Timeline anchored on one stream, and pushes
the frames at the current position to a viewer sink.
"""

from __future__ import annotations

from pathlib import Path
from typing import List, Optional

from depth_logger.core.logging_utils import get_module_logger
from .codecs.frame_types import StreamKind
from .constants import FRAME_HEIGHT, FRAME_WIDTH
from .export import export_frame
from .storage.recording import Recording
from .timeline import ResolvedFrame, Timeline
from .tracking.sensor_types import ViewerSink

CAMERA_STREAMS = (StreamKind.DEPTH, StreamKind.COLOR)


class PlaybackController:

    def __init__(
        self,
        recording: Recording,
        timeline: Optional[Timeline] = None,
        viewer: Optional[ViewerSink] = None,
        camera: StreamKind = StreamKind.DEPTH,
    ):
        if camera not in CAMERA_STREAMS:
            raise ValueError(f"Camera stream must be depth or color, got {camera.value!r}")
        self.logger = get_module_logger("PlaybackController")
        self.recording = recording
        self.timeline = timeline if timeline is not None else Timeline.from_recording(recording)
        self.viewer = viewer
        self.camera = camera
        self._index: Optional[int] = None
        self._current: Optional[ResolvedFrame] = None

    @property
    def index(self) -> Optional[int]:
        return self._index

    @property
    def current(self) -> Optional[ResolvedFrame]:
        return self._current

    def available_streams(self) -> List[StreamKind]:
        """Streams holding at least one frame; drives which views are enabled."""
        return self.recording.available_streams()

    def select_camera(self, camera: StreamKind) -> None:
        """Switch the background between the depth and color images."""
        if camera not in CAMERA_STREAMS:
            raise ValueError(f"Camera stream must be depth or color, got {camera.value!r}")
        self.camera = camera
        if self._index is not None:
            self.seek(self._index)

    def select_stream(self, anchor: StreamKind) -> Timeline:
        """Re-anchor the timeline on ``anchor``, keeping the current timestamp if it exists there."""
        if not self.recording.has(anchor):
            raise ValueError(f"Stream {anchor.value!r} has no frames to step through")

        previous = self._current.timestamp if self._current is not None else None
        self.timeline = Timeline.from_recording(self.recording, anchor)
        self.logger.info("Timeline anchored on %s (%d positions)", anchor.value, len(self.timeline))

        index = self.timeline.index_of(previous) if previous is not None else None
        self._index = None
        self._current = None
        if index is not None:
            self.seek(index)
        elif len(self.timeline):
            self.seek(0)
        return self.timeline

    def seek(self, index: int) -> ResolvedFrame:
        """Resolve ``index`` and push it to the viewer. Raises TimelineIndexError."""
        resolved = self.timeline.resolve(index)
        self._index = index
        self._current = resolved
        self._push(resolved)
        return resolved

    def step(self, delta: int = 1) -> Optional[ResolvedFrame]:
        """Move relative to the current position, clamped to the timeline."""
        if not len(self.timeline):
            return None
        start = self._index if self._index is not None else 0
        target = min(max(start + delta, 0), len(self.timeline) - 1)
        return self.seek(target)

    def _push(self, resolved: ResolvedFrame) -> None:
        if self.viewer is None:
            return

        background = resolved.frame_for(self.camera)
        if background is not None:
            buffer = background.payload
            self.viewer.set_background(buffer, buffer.width, buffer.height)
        else:
            self.viewer.set_background(None, FRAME_WIDTH, FRAME_HEIGHT)

        segmentation = resolved.segmentation
        self.viewer.set_user_map(segmentation.payload if segmentation is not None else None)

        skeleton = resolved.skeleton_depth
        user_id = skeleton.user_id if skeleton is not None and skeleton.user_id is not None else 0
        self.viewer.set_user_coordinate(skeleton, user_id)

    def save_frame(self, directory: Path, stream: Optional[StreamKind] = None) -> Optional[Path]:
        """Export the current position as PNG; defaults to the selected camera stream."""
        if self._current is None:
            self.logger.warning("No frame selected; nothing to save")
            return None
        return export_frame(self._current, directory, stream or self.camera)


__all__ = ["CAMERA_STREAMS", "PlaybackController"]
