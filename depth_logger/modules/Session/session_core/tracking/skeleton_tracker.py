"""
Skeleton Tracker - turns per-frame raw user joints into a recorded history.

Each user id moves through three states:
- NEW: seen and visible, skeleton tracking requested, no samples yet
- TRACKED: skeleton calibrated, one sample per visible frame
- LOST: reported lost by the sensor; terminal, history kept but never extended

Samples are always computed for live display. They are appended to the
user's history only while recording is enabled.
"""

from __future__ import annotations

import threading
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Optional, Tuple

import numpy as np

from depth_logger.core.logging_utils import get_module_logger
from ..codecs.frame_types import CoordinateSystem, SkeletonSample, Vec3
from ..constants import JOINT_COMPONENTS, JOINT_COUNT
from .sensor_types import RawUser, RawUserFrame, SensorSource, SkeletonState, ViewerSink


class UserState(Enum):
    NEW = "new"
    TRACKED = "tracked"
    LOST = "lost"


@dataclass
class TrackingResult:
    """Outcome of one frame.

    ``samples`` holds every sample computed this frame (keyed by user id),
    ``recorded`` the subset appended to history, in processing order.
    ``projected`` holds the depth-projected samples computed alongside
    real-world output, and ``recorded_projected`` those taken while recording.
    Both stay empty when the output system is already depth.
    """

    timestamp: int
    samples: Dict[int, SkeletonSample] = field(default_factory=dict)
    recorded: List[SkeletonSample] = field(default_factory=list)
    projected: Dict[int, SkeletonSample] = field(default_factory=dict)
    recorded_projected: List[SkeletonSample] = field(default_factory=list)


class SkeletonTracker:
    """Per-user skeleton state machine with a recording gate."""

    def __init__(
        self,
        sensor: SensorSource,
        coordinate_system: CoordinateSystem = CoordinateSystem.REAL_WORLD,
        viewer: Optional[ViewerSink] = None,
    ):
        self.logger = get_module_logger("SkeletonTracker")
        self._sensor = sensor
        self._coordinate_system = coordinate_system
        self._viewer = viewer

        self._states: Dict[int, UserState] = {}
        self._history: Dict[int, List[SkeletonSample]] = {}
        self._recording = False
        self._lock = threading.RLock()

    # =========================================================================
    # Configuration
    # =========================================================================

    @property
    def coordinate_system(self) -> CoordinateSystem:
        return self._coordinate_system

    def set_viewer(self, viewer: Optional[ViewerSink]) -> None:
        """Attach or detach (None) the live viewer sink."""
        with self._lock:
            self._viewer = viewer

    @property
    def needs_depth_projection(self) -> bool:
        return self._coordinate_system is CoordinateSystem.DEPTH or self._viewer is not None

    # =========================================================================
    # Recording gate
    # =========================================================================

    @property
    def is_recording(self) -> bool:
        return self._recording

    def start_recording(self) -> None:
        with self._lock:
            if not self._recording:
                self.logger.info("Skeleton recording started")
            self._recording = True

    def stop_recording(self) -> None:
        with self._lock:
            if self._recording:
                self.logger.info("Skeleton recording stopped")
            self._recording = False

    # =========================================================================
    # Frame processing
    # =========================================================================

    def process_frame(self, frame: RawUserFrame) -> TrackingResult:
        result = TrackingResult(timestamp=int(frame.timestamp))
        with self._lock:
            for user in frame.users:
                if not self._is_user_tracked(user):
                    continue

                sample, projected = self._extract_joints(user, result.timestamp)
                result.samples[user.user_id] = sample
                if projected is not None:
                    result.projected[user.user_id] = projected

                if self._recording:
                    self._history.setdefault(user.user_id, []).append(sample)
                    result.recorded.append(sample)
                    if projected is not None:
                        result.recorded_projected.append(projected)
        return result

    def _is_user_tracked(self, user: RawUser) -> bool:
        user_id = user.user_id
        state = self._states.get(user_id)

        if state is UserState.LOST:
            return False

        if user.is_lost:
            self._states[user_id] = UserState.LOST
            self._sensor.stop_skeleton_tracking(user_id)
            self.logger.info("User %d lost", user_id)
            return False

        if not user.is_visible:
            return False

        if state is None:
            self._states[user_id] = UserState.NEW
            self._sensor.start_skeleton_tracking(user_id)
            self.logger.debug("User %d detected, skeleton tracking requested", user_id)

        if user.is_new:
            return False

        if user.skeleton_state is not SkeletonState.TRACKED:
            return False

        if self._states[user_id] is UserState.NEW:
            self._states[user_id] = UserState.TRACKED
            self.logger.info("User %d tracked", user_id)
        return True

    def _extract_joints(
        self, user: RawUser, timestamp: int
    ) -> Tuple[SkeletonSample, Optional[SkeletonSample]]:
        """Build the output sample, projecting to depth when needed.

        Depth-projected joints take (x, y) from the sensor's projection of the
        real-world position and keep the real-world z. The second element is
        the depth-projected sample when it was computed in addition to a
        real-world output sample.
        """
        positions = list(user.joints)[:JOINT_COUNT]
        positions.extend([None] * (JOINT_COUNT - len(positions)))

        real: List[Optional[Vec3]] = []
        depth: List[Optional[Vec3]] = []
        project = self.needs_depth_projection

        for position in positions:
            if position is None or len(position) != JOINT_COMPONENTS:
                real.append(None)
                depth.append(None)
                continue
            x, y, z = (float(c) for c in position)
            real.append((x, y, z))
            if project:
                px, py = self._sensor.convert_joint_coordinates_to_depth((x, y, z))
                depth.append((float(px), float(py), z))

        depth_sample: Optional[SkeletonSample] = None
        if project:
            depth_sample = SkeletonSample(timestamp, tuple(depth), CoordinateSystem.DEPTH, user.user_id)
            if self._viewer is not None:
                self._viewer.set_user_coordinate(depth_sample, user.user_id)

        if self._coordinate_system is CoordinateSystem.DEPTH:
            return depth_sample, None
        real_sample = SkeletonSample(timestamp, tuple(real), CoordinateSystem.REAL_WORLD, user.user_id)
        return real_sample, depth_sample

    # =========================================================================
    # History access
    # =========================================================================

    def user_state(self, user_id: int) -> Optional[UserState]:
        with self._lock:
            return self._states.get(user_id)

    def get_history(self) -> Dict[int, List[SkeletonSample]]:
        with self._lock:
            return {user_id: list(samples) for user_id, samples in self._history.items()}

    def history_arrays(self) -> Dict[int, np.ndarray]:
        """Per-user (frames, 15, 3) arrays with NaN for absent joints."""
        with self._lock:
            return {
                user_id: np.stack([s.to_array() for s in samples])
                for user_id, samples in self._history.items()
                if samples
            }

    def frames_count(self) -> int:
        """Number of recorded frames for the user with the longest history."""
        with self._lock:
            return max((len(samples) for samples in self._history.values()), default=0)

    def clear_history(self) -> None:
        """Drop recorded samples and user states for a fresh session."""
        with self._lock:
            self._history.clear()
            self._states.clear()
