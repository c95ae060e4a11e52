"""Frame payload types shared by the codec, stores, tracker and timeline."""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum, IntEnum
from typing import Generic, Optional, Sequence, Tuple, TypeVar

import numpy as np

from ..constants import FRAME_HEIGHT, FRAME_WIDTH, JOINT_COMPONENTS, JOINT_COUNT

Vec3 = Tuple[float, float, float]
JointSlots = Tuple[Optional[Vec3], ...]

P = TypeVar("P")


class StreamKind(Enum):
    """Each independently timestamped stream in a recording."""

    COLOR = "color"
    DEPTH = "depth"
    SEGMENTATION = "segmentation"
    SKELETON_REAL = "skeleton"
    SKELETON_DEPTH = "skeleton_depth"


class CoordinateSystem(Enum):
    REAL_WORLD = "real"
    DEPTH = "depth"


class Joint(IntEnum):
    """Slot order of the 15 tracked joints inside a SkeletonSample."""

    HEAD = 0
    NECK = 1
    LEFT_SHOULDER = 2
    RIGHT_SHOULDER = 3
    LEFT_ELBOW = 4
    RIGHT_ELBOW = 5
    LEFT_HAND = 6
    RIGHT_HAND = 7
    TORSO = 8
    LEFT_HIP = 9
    RIGHT_HIP = 10
    LEFT_KNEE = 11
    RIGHT_KNEE = 12
    LEFT_FOOT = 13
    RIGHT_FOOT = 14


@dataclass(frozen=True, slots=True)
class PixelBuffer:
    """Raw little-endian pixel bytes plus the geometry needed to view them."""

    data: bytes
    bytes_per_pixel: int
    width: int = FRAME_WIDTH
    height: int = FRAME_HEIGHT

    @property
    def pixel_count(self) -> int:
        return len(self.data) // self.bytes_per_pixel

    @property
    def matches_geometry(self) -> bool:
        return self.pixel_count == self.width * self.height

    def as_array(self) -> np.ndarray:
        """Return a read-only numpy view, shaped (height, width[, channels]) when possible."""
        if self.bytes_per_pixel == 2:
            flat = np.frombuffer(self.data, dtype="<u2")
            channels = 1
        else:
            flat = np.frombuffer(self.data, dtype=np.uint8)
            channels = self.bytes_per_pixel

        if not self.matches_geometry:
            return flat if channels == 1 else flat.reshape(-1, channels)
        if channels == 1:
            return flat.reshape(self.height, self.width)
        return flat.reshape(self.height, self.width, channels)


@dataclass(frozen=True, slots=True)
class Frame(Generic[P]):
    timestamp: int
    payload: P


def _normalize_joint(value: Optional[Sequence[float]]) -> Optional[Vec3]:
    if value is None:
        return None
    if len(value) != JOINT_COMPONENTS:
        raise ValueError(f"Joint must have {JOINT_COMPONENTS} components, got {len(value)}")
    return (float(value[0]), float(value[1]), float(value[2]))


@dataclass(frozen=True, slots=True)
class SkeletonSample:
    """One user's 15 joints at one timestamp; absent joints are ``None``."""

    timestamp: int
    joints: JointSlots
    coordinate_system: CoordinateSystem = CoordinateSystem.REAL_WORLD
    user_id: Optional[int] = None

    def __post_init__(self) -> None:
        if len(self.joints) != JOINT_COUNT:
            raise ValueError(f"SkeletonSample needs {JOINT_COUNT} joints, got {len(self.joints)}")
        object.__setattr__(self, "joints", tuple(_normalize_joint(j) for j in self.joints))

    def joint(self, joint: Joint | int) -> Optional[Vec3]:
        return self.joints[int(joint)]

    @property
    def present_count(self) -> int:
        return sum(1 for j in self.joints if j is not None)

    def to_array(self) -> np.ndarray:
        """Return a (15, 3) float array with NaN rows for absent joints."""
        out = np.full((JOINT_COUNT, JOINT_COMPONENTS), np.nan, dtype=np.float64)
        for index, joint in enumerate(self.joints):
            if joint is not None:
                out[index] = joint
        return out


def empty_joints() -> JointSlots:
    return (None,) * JOINT_COUNT


__all__ = [
    "CoordinateSystem",
    "Frame",
    "Joint",
    "JointSlots",
    "PixelBuffer",
    "SkeletonSample",
    "StreamKind",
    "Vec3",
    "empty_joints",
]
