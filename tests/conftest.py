"""
Pytest configuration and shared fixtures
"""
import json
import os
import sys
import threading

import pytest

# Add parent directory to path for imports
sys.path.insert(0, os.path.dirname(os.path.dirname(os.path.abspath(__file__))))

# Headless Qt for CI
os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")

from jsontag import Tracker, TrackerConfig
from jsontag.storage import MemoryStore
from jsontag.transport import HTTPResult

START_TIME = 1_700_000_000_000  # 2023-11-14, ms
MINUTE = 60 * 1000
DAY = 24 * 60 * MINUTE


class FakeClock:
    """Millisecond clock tests can move forward"""

    def __init__(self, now=START_TIME):
        self.now = now

    def __call__(self):
        return self.now

    def advance(self, minutes=0, days=0, millis=0):
        self.now += minutes * MINUTE + days * DAY + millis


class FakeTransport:
    """Records posts and answers with queued (or default) results"""

    def __init__(self, default=None):
        self.default = default or HTTPResult(status=200, body="{}")
        self.responses = []
        self.requests = []
        self._lock = threading.Lock()

    def respond_with(self, *results):
        self.responses.extend(results)

    def post(self, url, payload, headers=None):
        with self._lock:
            self.requests.append({
                "url": url,
                "body": json.loads(payload.decode("utf-8")),
                "raw": payload,
                "headers": dict(headers or {}),
            })
            if self.responses:
                return self.responses.pop(0)
            return self.default

    @property
    def event_names(self):
        with self._lock:
            return [r["body"]["event_name"] for r in self.requests]

    def bodies(self, event_name=None):
        with self._lock:
            return [r["body"] for r in self.requests
                    if event_name is None or r["body"]["event_name"] == event_name]


@pytest.fixture(scope="session")
def qapp():
    """Create QApplication instance for GUI tests"""
    from PyQt6.QtWidgets import QApplication

    app = QApplication.instance()
    if app is None:
        app = QApplication(sys.argv)
    yield app
    # Don't quit - let pytest handle cleanup


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store():
    return MemoryStore()


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config():
    """Blocking sends so every request is visible as soon as track_event returns"""
    return TrackerConfig(
        endpoint="https://sst.example.com",
        path="/data",
        install_time=START_TIME - 10 * DAY,
        background=False,
    )


@pytest.fixture
def make_tracker(config, store, transport, clock):
    """Factory for trackers sharing the test's store, transport and clock"""
    created = []

    def _make(cfg=None, **overrides):
        tracker = Tracker(
            cfg or config,
            store=overrides.get("store", store),
            transport=overrides.get("transport", transport),
            clock=overrides.get("clock", clock),
        )
        created.append(tracker)
        return tracker

    yield _make

    for tracker in created:
        tracker.shutdown(wait=True)


@pytest.fixture
def ready_tracker(make_tracker, transport):
    """Initialized tracker with the first_launch request already cleared"""
    tracker = make_tracker()
    tracker.initialize()
    transport.requests.clear()
    return tracker
