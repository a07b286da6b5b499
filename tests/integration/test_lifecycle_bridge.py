"""
Integration tests for the Qt lifecycle bridge
"""
import pytest
from PyQt6.QtCore import Qt

from jsontag.lifecycle import QtLifecycleBridge


class RecordingTracker:
    """Stands in for Tracker; counts foreground notifications"""

    def __init__(self):
        self.foreground_calls = 0

    def on_foreground(self):
        self.foreground_calls += 1
        return False


@pytest.mark.ui
class TestQtLifecycleBridge:
    """Test forwarding of application state changes"""

    @pytest.fixture
    def bridge(self, qapp):
        tracker = RecordingTracker()
        bridge = QtLifecycleBridge(tracker, qapp)
        yield bridge
        bridge.detach()

    def test_connects_to_running_application(self, bridge):
        assert bridge.connected

    def test_active_state_forwarded(self, bridge, qtbot):
        with qtbot.waitSignal(bridge.foregrounded, timeout=1000):
            bridge._on_application_state_changed(Qt.ApplicationState.ApplicationActive)

        # waitSignal spins the event loop, so the platform may report activation too
        assert bridge.tracker.foreground_calls >= 1

    @pytest.mark.parametrize("state", [
        Qt.ApplicationState.ApplicationInactive,
        Qt.ApplicationState.ApplicationHidden,
        Qt.ApplicationState.ApplicationSuspended,
    ])
    def test_other_states_ignored(self, bridge, qtbot, state):
        with qtbot.assertNotEmitted(bridge.foregrounded):
            bridge._on_application_state_changed(state)

        assert bridge.tracker.foreground_calls == 0

    def test_application_signal_reaches_tracker(self, bridge, qapp):
        qapp.applicationStateChanged.emit(Qt.ApplicationState.ApplicationActive)
        assert bridge.tracker.foreground_calls == 1

    def test_detach_stops_forwarding(self, bridge, qapp):
        bridge.detach()
        assert not bridge.connected

        qapp.applicationStateChanged.emit(Qt.ApplicationState.ApplicationActive)
        assert bridge.tracker.foreground_calls == 0

    def test_real_tracker_gets_launch_after_timeout(self, qapp, ready_tracker, transport, clock):
        bridge = QtLifecycleBridge(ready_tracker, qapp)
        try:
            bridge._on_application_state_changed(Qt.ApplicationState.ApplicationActive)
            clock.advance(minutes=10)
            bridge._on_application_state_changed(Qt.ApplicationState.ApplicationActive)
        finally:
            bridge.detach()

        assert transport.event_names == ["launch"]

    def test_bridge_created_before_ready_is_ignored_until_ready(self, qapp, make_tracker,
                                                                 transport, store, clock):
        tracker = make_tracker()
        bridge = QtLifecycleBridge(tracker, qapp)
        try:
            bridge._on_application_state_changed(Qt.ApplicationState.ApplicationActive)
            assert not store.contains("last_launch_time")

            tracker.initialize()
            clock.advance(minutes=10)
            bridge._on_application_state_changed(Qt.ApplicationState.ApplicationActive)
        finally:
            bridge.detach()

        assert transport.event_names == ["first_launch", "launch"]
