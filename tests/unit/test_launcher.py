"""
Unit tests for the demo launcher wiring
"""
import pytest

from jsontag import EventType, TrackerConfig
from tests.conftest import FakeTransport


class TestGlobalEventData:
    """Test the global data the demo app attaches to every event"""

    def test_sections_present(self):
        from launcher import collect_global_event_data

        data = collect_global_event_data("2.0")

        assert list(data) == ["app", "device", "settings", "consent"]
        assert data["app"]["version"] == "2.0"
        assert data["device"]["os_name"]
        assert all(value is True for value in data["consent"].values())


@pytest.mark.ui
class TestBuildTracker:
    """Test tracker construction with QSettings persistence"""

    def test_tracker_uses_qsettings_and_global_data(self, qapp, tmp_path):
        from PyQt6.QtCore import QSettings
        from launcher import build_tracker

        settings = QSettings(str(tmp_path / "launcher.ini"), QSettings.Format.IniFormat)
        config = TrackerConfig(endpoint="https://sst.example.com", path="/data",
                               app_version="2.0", background=False)
        tracker = build_tracker(config, settings)
        transport = FakeTransport()
        tracker.dispatcher.transport = transport

        tracker.initialize()
        tracker.track_event("screen_view", EventType.VIEW, {"page_title": "Home"})
        tracker.shutdown()

        assert transport.event_names == ["first_launch", "screen_view"]
        assert transport.bodies("screen_view")[0]["app"]["version"] == "2.0"
        assert settings.value("jsontag/is_first_launch") in (False, "false")
