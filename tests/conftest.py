import pytest

from scroll_velocity.tracking.clock import ManualClock


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture(autouse=True)
def isolated_settings(tmp_path, monkeypatch):
    """Point the settings file at a temp dir so tests never read the user's file."""
    path = tmp_path / "settings.json"
    monkeypatch.setenv("SCROLL_VELOCITY_SETTINGS", str(path))
    return path
