"""Unit tests for the skeleton tracker state machine and recording gate."""

import numpy as np
import pytest

from depth_logger.modules.Session.session_core.codecs import CoordinateSystem
from depth_logger.modules.Session.session_core.tracking import (
    SkeletonState,
    SkeletonTracker,
    UserState,
)
from tests.infrastructure.helpers import generate_joints, make_frame, make_user


@pytest.fixture
def tracker(fake_sensor):
    return SkeletonTracker(fake_sensor)


class TestUserLifecycle:
    """Test NEW -> TRACKED -> LOST transitions."""

    def test_new_user_requests_tracking(self, tracker, fake_sensor):
        result = tracker.process_frame(make_frame(1, make_user(7, is_new=True)))

        assert fake_sensor.started == [7]
        assert tracker.user_state(7) is UserState.NEW
        assert result.samples == {}

    def test_calibrated_user_becomes_tracked(self, tracker):
        tracker.process_frame(make_frame(1, make_user(7, is_new=True)))
        result = tracker.process_frame(make_frame(2, make_user(7)))

        assert tracker.user_state(7) is UserState.TRACKED
        assert 7 in result.samples

    def test_first_sight_already_calibrated(self, tracker, fake_sensor):
        result = tracker.process_frame(make_frame(1, make_user(3)))

        assert fake_sensor.started == [3]
        assert tracker.user_state(3) is UserState.TRACKED
        assert 3 in result.samples

    def test_tracking_requested_once(self, tracker, fake_sensor):
        for ts in range(5):
            tracker.process_frame(make_frame(ts, make_user(1)))
        assert fake_sensor.started == [1]

    def test_uncalibrated_skeleton_skipped(self, tracker):
        result = tracker.process_frame(
            make_frame(1, make_user(2, skeleton_state=SkeletonState.CALIBRATING))
        )

        assert result.samples == {}
        assert tracker.user_state(2) is UserState.NEW

    def test_invisible_user_skipped(self, tracker, fake_sensor):
        result = tracker.process_frame(make_frame(1, make_user(4, is_visible=False)))

        assert result.samples == {}
        assert fake_sensor.started == []
        assert tracker.user_state(4) is None

    def test_lost_user_stops_tracking(self, tracker, fake_sensor):
        tracker.process_frame(make_frame(1, make_user(5)))
        tracker.process_frame(make_frame(2, make_user(5, is_lost=True)))

        assert fake_sensor.stopped == [5]
        assert tracker.user_state(5) is UserState.LOST

    def test_lost_is_terminal(self, tracker):
        tracker.start_recording()
        tracker.process_frame(make_frame(1, make_user(5)))
        tracker.process_frame(make_frame(2, make_user(5, is_lost=True)))
        result = tracker.process_frame(make_frame(3, make_user(5)))

        assert result.samples == {}
        assert len(tracker.get_history()[5]) == 1

    def test_users_are_independent(self, tracker):
        tracker.process_frame(make_frame(1, make_user(1), make_user(2, is_new=True)))

        assert tracker.user_state(1) is UserState.TRACKED
        assert tracker.user_state(2) is UserState.NEW


class TestRecordingGate:
    """Test that samples reach history only while recording."""

    def test_no_history_before_start(self, tracker):
        result = tracker.process_frame(make_frame(1, make_user(1)))

        assert 1 in result.samples
        assert result.recorded == []
        assert tracker.get_history() == {}
        assert tracker.frames_count() == 0

    def test_history_between_start_and_stop(self, tracker):
        tracker.process_frame(make_frame(1, make_user(1)))
        tracker.start_recording()
        tracker.process_frame(make_frame(2, make_user(1)))
        tracker.process_frame(make_frame(3, make_user(1)))
        tracker.stop_recording()
        tracker.process_frame(make_frame(4, make_user(1)))

        history = tracker.get_history()[1]
        assert [s.timestamp for s in history] == [2, 3]

    def test_toggling_keeps_history(self, tracker):
        tracker.start_recording()
        tracker.process_frame(make_frame(1, make_user(1)))
        tracker.stop_recording()
        tracker.start_recording()
        tracker.process_frame(make_frame(2, make_user(1)))

        assert [s.timestamp for s in tracker.get_history()[1]] == [1, 2]

    def test_start_and_stop_are_idempotent(self, tracker):
        tracker.start_recording()
        tracker.start_recording()
        assert tracker.is_recording is True

        tracker.stop_recording()
        tracker.stop_recording()
        assert tracker.is_recording is False

    def test_history_is_a_copy(self, tracker):
        tracker.start_recording()
        tracker.process_frame(make_frame(1, make_user(1)))

        tracker.get_history()[1].clear()
        assert len(tracker.get_history()[1]) == 1

    def test_frames_count_uses_longest_history(self, tracker):
        tracker.start_recording()
        tracker.process_frame(make_frame(1, make_user(1), make_user(2)))
        tracker.process_frame(make_frame(2, make_user(1)))

        assert tracker.frames_count() == 2

    def test_history_arrays(self, tracker):
        tracker.start_recording()
        tracker.process_frame(make_frame(1, make_user(1, generate_joints(missing=[0]))))
        tracker.process_frame(make_frame(2, make_user(1)))

        arrays = tracker.history_arrays()
        assert arrays[1].shape == (2, 15, 3)
        assert np.isnan(arrays[1][0, 0]).all()

    def test_clear_history(self, tracker):
        tracker.start_recording()
        tracker.process_frame(make_frame(1, make_user(1)))
        tracker.clear_history()

        assert tracker.get_history() == {}
        assert tracker.user_state(1) is None


class TestCoordinateSystems:
    """Test real-world output and depth projection."""

    def test_real_world_sample(self, tracker, fake_sensor):
        joints = generate_joints(base=(0.1, 0.2, 0.3))
        result = tracker.process_frame(make_frame(1, make_user(1, joints)))
        sample = result.samples[1]

        assert sample.coordinate_system is CoordinateSystem.REAL_WORLD
        assert sample.joints[0] == pytest.approx((0.1, 0.2, 0.3))
        assert sample.user_id == 1
        assert fake_sensor.projections == 0

    def test_depth_projection_keeps_real_z(self, fake_sensor):
        tracker = SkeletonTracker(fake_sensor, CoordinateSystem.DEPTH)
        joints = generate_joints(base=(0.1, 0.2, 0.3))
        sample = tracker.process_frame(make_frame(1, make_user(1, joints))).samples[1]

        assert sample.coordinate_system is CoordinateSystem.DEPTH
        x, y, z = sample.joints[0]
        assert x == pytest.approx(0.1 * 100 + 320)
        assert y == pytest.approx(0.2 * 100 + 240)
        assert z == pytest.approx(0.3)

    def test_missing_joint_not_projected(self, fake_sensor):
        tracker = SkeletonTracker(fake_sensor, CoordinateSystem.DEPTH)
        joints = generate_joints(missing=[4])
        sample = tracker.process_frame(make_frame(1, make_user(1, joints))).samples[1]

        assert sample.joints[4] is None
        assert fake_sensor.projections == 14

    def test_short_joint_list_padded(self, tracker):
        sample = tracker.process_frame(
            make_frame(1, make_user(1, [(1.0, 2.0, 3.0)]))
        ).samples[1]

        assert len(sample.joints) == 15
        assert sample.joints[0] == (1.0, 2.0, 3.0)
        assert sample.joints[1] is None

    def test_viewer_receives_depth_sample(self, fake_sensor, viewer):
        tracker = SkeletonTracker(fake_sensor, viewer=viewer)
        result = tracker.process_frame(make_frame(1, make_user(9)))

        assert result.samples[9].coordinate_system is CoordinateSystem.REAL_WORLD
        assert len(viewer.coordinates) == 1
        sample, user_id = viewer.coordinates[0]
        assert user_id == 9
        assert sample.coordinate_system is CoordinateSystem.DEPTH

    def test_projected_sample_returned_with_viewer(self, fake_sensor, viewer):
        tracker = SkeletonTracker(fake_sensor, viewer=viewer)
        tracker.start_recording()
        result = tracker.process_frame(make_frame(1, make_user(9, generate_joints(base=(0.1, 0.2, 0.3)))))

        projected = result.projected[9]
        assert projected is viewer.last_coordinate
        assert projected.joints[0] == pytest.approx((0.1 * 100 + 320, 0.2 * 100 + 240, 0.3))
        assert result.recorded_projected == [projected]
        assert tracker.get_history()[9][0].coordinate_system is CoordinateSystem.REAL_WORLD

    def test_no_projected_samples_in_depth_mode(self, fake_sensor):
        tracker = SkeletonTracker(fake_sensor, CoordinateSystem.DEPTH)
        tracker.start_recording()
        result = tracker.process_frame(make_frame(1, make_user(1)))

        assert result.recorded[0].coordinate_system is CoordinateSystem.DEPTH
        assert result.projected == {}
        assert result.recorded_projected == []

    def test_projected_not_recorded_before_start(self, fake_sensor, viewer):
        tracker = SkeletonTracker(fake_sensor, viewer=viewer)
        result = tracker.process_frame(make_frame(1, make_user(1)))

        assert 1 in result.projected
        assert result.recorded_projected == []

    def test_needs_depth_projection(self, fake_sensor, viewer):
        tracker = SkeletonTracker(fake_sensor)
        assert tracker.needs_depth_projection is False

        tracker.set_viewer(viewer)
        assert tracker.needs_depth_projection is True

        assert SkeletonTracker(fake_sensor, CoordinateSystem.DEPTH).needs_depth_projection is True
