from .sensor_types import RawUser, RawUserFrame, SensorSource, SkeletonState, ViewerSink
from .skeleton_tracker import SkeletonTracker, TrackingResult, UserState

__all__ = [
    "RawUser",
    "RawUserFrame",
    "SensorSource",
    "SkeletonState",
    "SkeletonTracker",
    "TrackingResult",
    "UserState",
    "ViewerSink",
]
