"""Shared pytest configuration and fixtures for the Depth Logger test suite."""

import sys
from pathlib import Path

import pytest

# Ensure the project root is in the path for imports
PROJECT_ROOT = Path(__file__).parent.parent
if str(PROJECT_ROOT) not in sys.path:
    sys.path.insert(0, str(PROJECT_ROOT))


# =============================================================================
# Pytest Configuration
# =============================================================================

def pytest_configure(config):
    """Configure custom pytest markers."""
    config.addinivalue_line(
        "markers", "hardware: mark test as requiring a physical depth sensor"
    )
    config.addinivalue_line(
        "markers", "slow: mark test as slow running"
    )


def pytest_addoption(parser):
    """Add custom command-line options."""
    parser.addoption(
        "--run-hardware",
        action="store_true",
        default=False,
        help="Run tests that require physical hardware",
    )


def pytest_collection_modifyitems(config, items):
    """Skip hardware tests unless --run-hardware is specified."""
    if config.getoption("--run-hardware"):
        return

    skip_hardware = pytest.mark.skip(reason="Need --run-hardware option to run")
    for item in items:
        if "hardware" in item.keywords:
            item.add_marker(skip_hardware)


# =============================================================================
# Shared Fixtures
# =============================================================================

@pytest.fixture
def project_root() -> Path:
    """Return the project root directory."""
    return PROJECT_ROOT


# =============================================================================
# Mock Fixtures
# =============================================================================

@pytest.fixture
def fake_sensor():
    """Create a fake user tracker with a linear depth projection."""
    from tests.infrastructure.mocks.sensor_mocks import FakeSensorSource
    return FakeSensorSource()


@pytest.fixture
def viewer():
    """Create a viewer sink that records every pushed frame."""
    from tests.infrastructure.mocks.sensor_mocks import RecordingViewer
    return RecordingViewer()


@pytest.fixture
def session_root(tmp_path: Path) -> Path:
    """Return an empty location for an on-disk session."""
    return tmp_path / "session"
