"""Session core package - capture, storage and playback of depth sensor sessions."""

from .constants import (
    FRAME_WIDTH,
    FRAME_HEIGHT,
    JOINT_COUNT,
    DEPTH_DIR,
    COLOR_DIR,
    SEGMENTATION_DIR,
    COORDINATES_DIR,
    REAL_COORDINATES_FILE,
    DEPTH_COORDINATES_FILE,
    DEFAULT_CHANNEL_CAPACITY,
)
from .codecs import (
    CoordinateSystem,
    Frame,
    FrameCodecError,
    Joint,
    PixelBuffer,
    SkeletonSample,
    StreamKind,
)
from .storage import Recording, StreamStore
from .timeline import ResolvedFrame, Timeline, TimelineIndexError
from .storage.session_loader import LoadReport, LoadResult, SessionLoader, SessionLoadError
from .storage.session_writer import SessionWriter, WriteReport
from .tracking import (
    RawUser,
    RawUserFrame,
    SensorSource,
    SkeletonState,
    SkeletonTracker,
    TrackingResult,
    UserState,
    ViewerSink,
)
from .recording import (
    ColorFrameEvent,
    DepthFrameEvent,
    FrameChannel,
    SegmentationFrameEvent,
    SessionRecorder,
    SkeletonFrameEvent,
)
from .export import export_frame
from .playback import PlaybackController

__all__ = [
    # Constants
    "FRAME_WIDTH",
    "FRAME_HEIGHT",
    "JOINT_COUNT",
    "DEPTH_DIR",
    "COLOR_DIR",
    "SEGMENTATION_DIR",
    "COORDINATES_DIR",
    "REAL_COORDINATES_FILE",
    "DEPTH_COORDINATES_FILE",
    "DEFAULT_CHANNEL_CAPACITY",
    # Frame types
    "CoordinateSystem",
    "Frame",
    "FrameCodecError",
    "Joint",
    "PixelBuffer",
    "SkeletonSample",
    "StreamKind",
    # Storage
    "Recording",
    "StreamStore",
    "LoadReport",
    "LoadResult",
    "SessionLoader",
    "SessionLoadError",
    "SessionWriter",
    "WriteReport",
    # Timeline
    "ResolvedFrame",
    "Timeline",
    "TimelineIndexError",
    # Tracking
    "RawUser",
    "RawUserFrame",
    "SensorSource",
    "SkeletonState",
    "SkeletonTracker",
    "TrackingResult",
    "UserState",
    "ViewerSink",
    # Recording
    "ColorFrameEvent",
    "DepthFrameEvent",
    "FrameChannel",
    "SegmentationFrameEvent",
    "SessionRecorder",
    "SkeletonFrameEvent",
    # Playback
    "PlaybackController",
    "export_frame",
]
