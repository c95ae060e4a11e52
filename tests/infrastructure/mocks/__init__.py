"""Mock collaborators for the Depth Logger test suite."""

from .sensor_mocks import FakeSensorSource, RecordingViewer

__all__ = ["FakeSensorSource", "RecordingViewer"]
