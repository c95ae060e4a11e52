from .events import (
    ColorFrameEvent,
    DepthFrameEvent,
    FrameChannel,
    FrameEvent,
    SegmentationFrameEvent,
    SkeletonFrameEvent,
)
from .session_recorder import SessionRecorder

__all__ = [
    "ColorFrameEvent",
    "DepthFrameEvent",
    "FrameChannel",
    "FrameEvent",
    "SegmentationFrameEvent",
    "SessionRecorder",
    "SkeletonFrameEvent",
]
