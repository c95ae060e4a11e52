"""Collaborator interfaces: the sensor that feeds the tracker and the viewer it feeds."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Optional, Protocol, Sequence, Tuple, runtime_checkable

from ..codecs.frame_types import PixelBuffer, SkeletonSample, Vec3


class SkeletonState(Enum):
    """Skeleton calibration state as reported by the user tracker."""

    NONE = "none"
    CALIBRATING = "calibrating"
    TRACKED = "tracked"
    CALIBRATION_ERROR = "calibration_error"


@dataclass(frozen=True, slots=True)
class RawUser:
    """One user as reported by the sensor for a single frame.

    ``joints`` holds the 15 real-world joint positions in slot order; a slot
    is ``None`` when the sensor reported no position for that joint.
    """

    user_id: int
    joints: Sequence[Optional[Vec3]] = ()
    is_new: bool = False
    is_visible: bool = True
    is_lost: bool = False
    skeleton_state: SkeletonState = SkeletonState.TRACKED


@dataclass(frozen=True, slots=True)
class RawUserFrame:
    timestamp: int
    users: Tuple[RawUser, ...] = field(default_factory=tuple)


@runtime_checkable
class SensorSource(Protocol):
    """User-tracker operations the skeleton tracker depends on."""

    def start_skeleton_tracking(self, user_id: int) -> None:
        ...

    def stop_skeleton_tracking(self, user_id: int) -> None:
        ...

    def convert_joint_coordinates_to_depth(self, position: Vec3) -> Tuple[float, float]:
        """Project a real-world position onto the depth image plane (x, y)."""
        ...


@runtime_checkable
class ViewerSink(Protocol):
    """Pass-through rendering sink fed during live capture and playback."""

    def set_background(self, buffer: Optional[PixelBuffer], width: int, height: int) -> None:
        ...

    def set_user_map(self, buffer: Optional[PixelBuffer]) -> None:
        ...

    def set_user_coordinate(self, sample: Optional[SkeletonSample], user_id: int) -> None:
        ...


__all__ = [
    "RawUser",
    "RawUserFrame",
    "SensorSource",
    "SkeletonState",
    "ViewerSink",
]
