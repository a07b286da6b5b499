#!/usr/bin/env python3
"""
JSON Tag Tracker demo launcher
Small Qt window wired to the tracker: screen views, a test event, and
launch events whenever the window comes back to the foreground
"""

import locale
import platform
import sys

from PyQt6.QtWidgets import QApplication, QLabel, QPushButton, QVBoxLayout, QWidget
from PyQt6.QtCore import QSettings

from jsontag import EventType, Tracker, TrackerConfig, load_config, webview_cookies
from jsontag.lifecycle import QtLifecycleBridge
from jsontag.storage import QSettingsStore

# Application version - single source of truth
VERSION = "1.1"

ORGANIZATION = "JsonTag"
APPLICATION = "JsonTagTestApp"


def collect_global_event_data(version: str = VERSION) -> dict:
    """Global event data describing the app, the device and consent state"""
    os_name = platform.system()
    if os_name == "Darwin":
        os_name = "macOS"
        os_version = platform.mac_ver()[0] or platform.release()
    else:
        os_version = platform.release()

    language = (locale.getlocale()[0] or "en_US").split("_")[0]

    return {
        "app": {
            "environment": "dev",
            "platform": "app",
            "id": "de.floriangoetting.jsontagtestapp",
            "version": version,
        },
        "device": {
            "os_name": os_name,
            "os_version": os_version,
            "model": platform.machine(),
            "language": language,
        },
        "settings": {
            "currency": "EUR",
            "locale": "de-DE",
            "language": "de",
            "country": "DE",
        },
        "consent": {
            "idservice": True,
            "klaro": True,
            "matomo": True,
            "amplitude": True,
        },
    }


def build_tracker(config: TrackerConfig, settings: QSettings = None) -> Tracker:
    """Create a tracker persisting its identity in QSettings"""
    store = QSettingsStore(ORGANIZATION, APPLICATION, settings=settings)
    tracker = Tracker(config, store=store)
    tracker.set_global_event_data(collect_global_event_data(config.app_version))
    return tracker


class DemoWindow(QWidget):
    """One screen, one button"""

    def __init__(self, tracker: Tracker):
        super().__init__()
        self.tracker = tracker
        self.setWindowTitle("JSON Tag Test App")

        layout = QVBoxLayout(self)
        self.info_label = QLabel()
        layout.addWidget(self.info_label)

        self.event_btn = QPushButton("Send test event")
        self.event_btn.clicked.connect(self.send_test_event)
        layout.addWidget(self.event_btn)

    def showEvent(self, event):
        super().showEvent(event)
        self.tracker.track_event("screen_view", EventType.VIEW, {"page_title": "Home"})
        self.refresh_info()

    def send_test_event(self):
        self.tracker.track_event("button_click", EventType.GENERIC_ACTION, {"button": {"label": "test"}})
        self.refresh_info()

    def refresh_info(self):
        info = self.tracker.get_user_info()
        cookies = webview_cookies(self.tracker)
        self.info_label.setText(
            f"Device: {info['device_id'] or '-'}\n"
            f"Launches: {info['launch_count']}\n"
            f"WebView cookies: {len(cookies)}"
        )


def main():
    app = QApplication(sys.argv)

    config = load_config()
    if config is None:
        print("tracker_config.py not found - copy tracker_config.example.py and set ENDPOINT")
        sys.exit(1)
    config.app_version = VERSION

    tracker = build_tracker(config)
    tracker.initialize()
    bridge = QtLifecycleBridge(tracker, app)

    window = DemoWindow(tracker)
    window.show()

    exit_code = app.exec()
    bridge.detach()
    tracker.shutdown(wait=True)
    sys.exit(exit_code)


if __name__ == "__main__":
    main()
