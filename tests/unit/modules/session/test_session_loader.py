"""Unit tests for loading on-disk sessions."""

from pathlib import Path

import pytest

from depth_logger.modules.Session.session_core.codecs import CoordinateSystem, StreamKind
from depth_logger.modules.Session.session_core.storage.session_loader import (
    LoadResult,
    SessionLoader,
    SessionLoadError,
    timestamp_from_name,
)
from tests.infrastructure.helpers import (
    SMALL_HEIGHT,
    SMALL_WIDTH,
    color_bytes,
    depth_bytes,
    generate_joints,
    joint_line,
    mask_bytes,
    write_session,
)


@pytest.fixture
def loader():
    return SessionLoader(width=SMALL_WIDTH, height=SMALL_HEIGHT)


class TestTimestampFromName:
    """Test file name to timestamp parsing."""

    @pytest.mark.parametrize(
        "name, expected",
        [
            ("100.bin", 100),
            ("frame_0042.bin", 42),
            ("12-34.bin", 1234),
            ("nodigits.bin", None),
            ("99999999999999999999.bin", None),
        ],
    )
    def test_parsing(self, name, expected):
        assert timestamp_from_name(name) == expected


class TestReferenceScenario:
    """Two full-size depth frames and one skeleton line."""

    def test_scenario(self, session_root):
        zeros = bytes(640 * 480 * 2)
        line = "100 [0.1, 0.2, 0.3]" + "[0, 0, 0]" * 14
        write_session(session_root, depth={100: zeros, 200: zeros}, real_lines=[line])

        result = SessionLoader().load(session_root)
        timeline = result.timeline

        assert timeline.length() == 2

        first = timeline.resolve(0)
        assert first.depth is not None
        assert first.depth.payload.data == zeros
        assert not first.depth.payload.as_array().any()
        assert first.skeleton.joints[0] == (0.1, 0.2, 0.3)

        second = timeline.resolve(1)
        assert second.depth is not None
        assert second.skeleton is None


class TestSessionLoader:
    """Test per-stream loading and per-entry tolerance."""

    def test_loads_every_stream(self, loader, session_root):
        write_session(
            session_root,
            depth={1: depth_bytes(), 2: depth_bytes()},
            color={1: color_bytes()},
            segmentation={1: mask_bytes([0, 1, 1, 0, 0, 0, 0, 1])},
            real_lines=[joint_line(1), joint_line(2)],
            depth_lines=[joint_line(1)],
        )

        result = loader.load(session_root)

        assert isinstance(result, LoadResult)
        rec = result.recording
        assert rec.depth.keys() == [1, 2]
        assert rec.color.keys() == [1]
        assert rec.skeleton_real.keys() == [1, 2]
        assert rec.skeleton_depth.get(1).coordinate_system is CoordinateSystem.DEPTH
        assert result.report.loaded[StreamKind.DEPTH] == 2
        assert result.report.skipped_count == 0
        assert result.report.missing == set()

    def test_segmentation_is_widened(self, loader, session_root):
        bits = [0, 1, 1, 0, 0, 0, 0, 1]
        write_session(session_root, depth={1: depth_bytes()}, segmentation={1: mask_bytes(bits)})

        stored = loader.load(session_root).recording.segmentation.get(1)

        assert stored.bytes_per_pixel == 2
        assert len(stored.data) == 2 * len(bits)
        assert [bool(v) for v in stored.as_array().ravel()] == [bool(b) for b in bits]

    def test_store_size_matches_entries(self, loader, session_root):
        frames = {ts: depth_bytes() for ts in (5, 50, 500, 5000)}
        write_session(session_root, depth=frames)

        rec = loader.load(session_root).recording

        assert len(rec.depth) == 4
        for ts in frames:
            assert rec.depth.get(ts) is not None

    def test_entry_without_digits_skipped(self, loader, session_root):
        write_session(session_root, depth={1: depth_bytes()})
        (session_root / "Depth" / "thumbs.bin").write_bytes(depth_bytes())

        result = loader.load(session_root)

        assert result.recording.depth.keys() == [1]
        assert result.report.skipped_count == 1

    def test_bad_buffer_length_skipped(self, loader, session_root):
        write_session(session_root, depth={1: depth_bytes(), 2: b"\x00\x01\x02"})

        result = loader.load(session_root)

        assert result.recording.depth.keys() == [1]
        assert result.report.skipped[0][0].name == "2.bin"

    def test_subdirectories_ignored(self, loader, session_root):
        write_session(session_root, depth={1: depth_bytes()})
        (session_root / "Depth" / "123").mkdir()

        assert loader.load(session_root).recording.depth.keys() == [1]

    def test_missing_streams_are_not_failures(self, loader, session_root):
        write_session(session_root, depth={1: depth_bytes()})

        result = loader.load(session_root)

        assert result.recording.available_streams() == [StreamKind.DEPTH]
        assert StreamKind.COLOR in result.report.missing
        assert StreamKind.SKELETON_REAL in result.report.missing
        assert len(result.timeline) == 1

    def test_no_depth_gives_empty_timeline(self, loader, session_root):
        write_session(session_root, color={1: color_bytes()})

        result = loader.load(session_root)

        assert len(result.timeline) == 0
        assert result.recording.color.keys() == [1]

    def test_malformed_coordinate_line_tolerated(self, loader, session_root):
        write_session(
            session_root,
            depth={1: depth_bytes()},
            real_lines=[
                "1 [0.1, 0.2, 0.3][oops][1, 2, 3]",
                joint_line(2, generate_joints(base=(5.0, 5.0, 5.0))),
            ],
        )

        rec = loader.load(session_root).recording
        first = rec.skeleton_real.get(1)

        assert len(first.joints) == 15
        assert first.joints[0] == (0.1, 0.2, 0.3)
        assert first.joints[1] is None
        assert first.joints[2] == (1.0, 2.0, 3.0)
        assert rec.skeleton_real.get(2).joints[0] == (5.0, 5.0, 5.0)

    def test_unreadable_entry_skipped_siblings_load(self, loader, session_root, monkeypatch):
        write_session(session_root, depth={1: depth_bytes(), 2: depth_bytes(), 3: depth_bytes()})
        original_read = Path.read_bytes

        def flaky(self):
            if self.name == "2.bin":
                raise OSError("I/O error")
            return original_read(self)

        monkeypatch.setattr(Path, "read_bytes", flaky)

        result = loader.load(session_root)

        assert result.recording.depth.keys() == [1, 3]
        assert [path.name for path, _ in result.report.skipped] == ["2.bin"]
        assert "read failed" in result.report.skipped[0][1]
        assert len(result.timeline) == 2

    def test_undecodable_coordinate_file_aborts_only_that_file(self, loader, session_root):
        write_session(
            session_root,
            depth={1: depth_bytes()},
            real_lines=[joint_line(1)],
            depth_lines=[joint_line(1)],
        )
        (session_root / "Coordinates" / "Real.txt").write_bytes(b"\xff\xfe")

        result = loader.load(session_root)

        assert result.recording.skeleton_real.is_empty is True
        assert result.recording.skeleton_depth.keys() == [1]
        assert result.recording.depth.keys() == [1]
        assert [path.name for path, _ in result.report.skipped] == ["Real.txt"]

    def test_missing_root_raises_load_error(self, loader, tmp_path):
        with pytest.raises(SessionLoadError) as excinfo:
            loader.load(tmp_path / "absent")

        assert excinfo.value.recording.available_streams() == []

    def test_unexpected_failure_keeps_partial_recording(self, loader, session_root, monkeypatch):
        write_session(session_root, depth={1: depth_bytes()}, real_lines=[joint_line(1)])

        def boom(self, directory, store, bytes_per_pixel, report):
            if store.kind is StreamKind.COLOR:
                raise RuntimeError("disk vanished")
            return original(self, directory, store, bytes_per_pixel, report)

        original = SessionLoader._load_buffers
        monkeypatch.setattr(SessionLoader, "_load_buffers", boom)

        with pytest.raises(SessionLoadError) as excinfo:
            loader.load(session_root)

        partial = excinfo.value.recording
        assert partial.depth.keys() == [1]
        assert partial.skeleton_real.keys() == [1]
        assert partial.segmentation.is_empty is True

    def test_submit_completes_future(self, loader, session_root):
        write_session(session_root, depth={1: depth_bytes()})

        future = loader.submit(session_root)
        result = future.result(timeout=10)

        assert len(result.timeline) == 1

    def test_submit_propagates_failure(self, loader, tmp_path):
        future = loader.submit(tmp_path / "absent")

        with pytest.raises(SessionLoadError):
            future.result(timeout=10)


class TestAsyncLoad:
    """Test the asyncio entry point."""

    @pytest.mark.asyncio
    async def test_load_async(self, loader, session_root):
        write_session(session_root, depth={1: depth_bytes(), 2: depth_bytes()})

        result = await loader.load_async(session_root)

        assert len(result.timeline) == 2

    @pytest.mark.asyncio
    async def test_load_async_failure(self, loader, tmp_path):
        with pytest.raises(SessionLoadError):
            await loader.load_async(tmp_path / "absent")
