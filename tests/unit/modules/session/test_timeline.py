"""Unit tests for the canonical timeline."""

import pytest

from depth_logger.modules.Session.session_core.codecs import (
    CoordinateSystem,
    PixelBuffer,
    SkeletonSample,
    StreamKind,
)
from depth_logger.modules.Session.session_core.storage import Recording
from depth_logger.modules.Session.session_core.timeline import Timeline, TimelineIndexError
from tests.infrastructure.helpers import depth_bytes, generate_joints


def _buffer(bpp: int = 2) -> PixelBuffer:
    return PixelBuffer(depth_bytes(), bpp, 4, 2)


@pytest.fixture
def recording():
    rec = Recording()
    for ts in (300, 100, 200):
        rec.depth.put(ts, _buffer())
    rec.color.put(200, PixelBuffer(bytes(24), 3, 4, 2))
    rec.color.put(250, PixelBuffer(bytes(24), 3, 4, 2))
    rec.skeleton_real.put(100, SkeletonSample(100, tuple(generate_joints())))
    rec.skeleton_depth.put(
        100, SkeletonSample(100, tuple(generate_joints()), CoordinateSystem.DEPTH)
    )
    return rec


class TestTimeline:
    """Test timeline construction and lookups."""

    def test_built_from_depth_keys(self, recording):
        timeline = Timeline.from_recording(recording)

        assert timeline.length() == 3
        assert len(timeline) == 3
        assert timeline.timestamps == [100, 200, 300]

    def test_every_timestamp_has_a_depth_frame(self, recording):
        timeline = Timeline.from_recording(recording)

        for index in range(len(timeline)):
            assert recording.depth.get(timeline.timestamp_at(index)) is not None

    def test_duplicate_timestamps_collapse(self, recording):
        timeline = Timeline(recording, [5, 5, 1])
        assert timeline.timestamps == [1, 5]

    @pytest.mark.parametrize("index", [-1, 3, 100])
    def test_out_of_range_index_raises(self, recording, index):
        timeline = Timeline.from_recording(recording)

        with pytest.raises(TimelineIndexError):
            timeline.timestamp_at(index)
        with pytest.raises(IndexError):
            timeline.resolve(index)

    def test_empty_recording_gives_empty_timeline(self):
        timeline = Timeline.from_recording(Recording())

        assert len(timeline) == 0
        with pytest.raises(TimelineIndexError):
            timeline.timestamp_at(0)

    def test_index_of(self, recording):
        timeline = Timeline.from_recording(recording)

        assert timeline.index_of(200) == 1
        assert timeline.index_of(250) is None


class TestResolve:
    """Test exact-match resolution across streams."""

    def test_resolves_present_streams(self, recording):
        resolved = Timeline.from_recording(recording).resolve(0)

        assert resolved.timestamp == 100
        assert resolved.depth is not None
        assert resolved.depth.timestamp == 100
        assert resolved.skeleton is not None
        assert resolved.skeleton_depth.coordinate_system is CoordinateSystem.DEPTH
        assert resolved.color is None
        assert resolved.segmentation is None

    def test_no_nearest_timestamp_fallback(self, recording):
        resolved = Timeline.from_recording(recording).resolve(2)

        assert resolved.timestamp == 300
        assert resolved.color is None
        assert resolved.skeleton is None

    def test_frame_for(self, recording):
        resolved = Timeline.from_recording(recording).resolve(1)

        assert resolved.frame_for(StreamKind.COLOR) is resolved.color
        assert resolved.frame_for(StreamKind.SKELETON_REAL) is None

    def test_disjoint_streams(self):
        rec = Recording()
        rec.depth.put(1, _buffer())
        rec.color.put(2, PixelBuffer(bytes(24), 3, 4, 2))

        resolved = Timeline.from_recording(rec).resolve(0)

        assert resolved.depth is not None
        assert resolved.color is None

    def test_color_anchor(self, recording):
        timeline = Timeline.from_recording(recording, StreamKind.COLOR)

        assert timeline.anchor is StreamKind.COLOR
        assert timeline.timestamps == [200, 250]
        resolved = timeline.resolve(1)
        assert resolved.color is not None
        assert resolved.depth is None
