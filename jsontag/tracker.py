"""
Tracker

The object a host application owns. Events tracked before initialize() has
resolved the first-launch check are queued and flushed in order once the
tracker is ready; afterwards they go straight to the dispatcher.
"""

import threading
from concurrent.futures import Future
from enum import Enum
from typing import Any, Dict, Mapping, Optional

from .config import TrackerConfig
from .dispatcher import DeliveryResult, Dispatcher, EventQueue, GlobalEventData
from .identity import IdentityManager
from .launch import KEY_LAUNCH_COUNTER, LaunchTracker
from .log import enable_debug_log, get_logger
from .payload import EventRecord, EventType
from .storage.base import KeyValueStore
from .storage.jsonfile import JsonFileStore
from .timeutil import Clock, current_time_millis
from .transport import HTTPTransport
from .webview import get_root_domain

log = get_logger("tracker")


class TrackerState(Enum):
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"


class Tracker:
    """Client-side analytics tracker"""

    def __init__(self, config: TrackerConfig, store: Optional[KeyValueStore] = None,
                 transport: Optional[HTTPTransport] = None, clock: Clock = current_time_millis):
        """
        Initialize tracker

        Args:
            config: Endpoint, identity and timing settings
            store: Persistence backend (default: JsonFileStore in ~/.jsontag)
            transport: HTTP transport (default: urllib with a custom User-Agent)
            clock: Millisecond clock (injectable for tests)
        """
        if config.debug:
            enable_debug_log()

        self.config = config
        self.store = store if store is not None else JsonFileStore()
        self.clock = clock

        self.identity = IdentityManager(
            self.store,
            session_timeout_minutes=config.session_timeout_minutes,
            clock=clock,
            install_time=config.install_time,
        )
        self.global_data = GlobalEventData()
        self.queue = EventQueue(max_size=config.max_queue_size)
        self.dispatcher = Dispatcher(config, self.identity, self.global_data, transport)
        self.launch_tracker = LaunchTracker(
            self.store,
            self.identity,
            self.dispatcher,
            self.track_event,
            launch_timeout_minutes=config.launch_timeout_minutes,
            clock=clock,
        )

        self._state = TrackerState.UNINITIALIZED
        self._state_lock = threading.RLock()
        self._ready = threading.Event()
        log.debug("Tracker created for %s", config.url)

    # Lifecycle -----------------------------------------------------------

    @property
    def state(self) -> TrackerState:
        return self._state

    @property
    def is_initialized(self) -> bool:
        return self._state is TrackerState.READY

    def initialize(self):
        """Resolve the first-launch check, then flush queued events"""
        with self._state_lock:
            if self._state is not TrackerState.UNINITIALIZED:
                log.debug("initialize() called again while %s - ignored", self._state.value)
                return
            self._state = TrackerState.INITIALIZING

        log.info("Initialisation started...")
        self.launch_tracker.track_first_launch(self._on_first_launch_resolved)

    def _on_first_launch_resolved(self):
        with self._state_lock:
            queued = self.queue.drain()
            try:
                for record in queued:
                    try:
                        self._dispatch(record)
                    except Exception:
                        log.exception("Could not flush queued event: %s", record.name)
            finally:
                self._state = TrackerState.READY
                self._ready.set()
        log.info("Tracker initialized (%d queued events flushed)", len(queued))

    def wait_until_ready(self, timeout: Optional[float] = None) -> bool:
        """Block until initialization completes. Returns False on timeout."""
        return self._ready.wait(timeout)

    def on_foreground(self) -> bool:
        """
        Called by the lifecycle bridge when the app comes to the foreground

        Returns:
            True if a launch event was emitted
        """
        if not self.is_initialized:
            log.debug("Foreground before initialization - ignored")
            return False
        return self.launch_tracker.on_foreground()

    def shutdown(self, wait: bool = True):
        """Stop background senders"""
        self.dispatcher.shutdown(wait=wait)

    # Tracking ------------------------------------------------------------

    def track_event(self, event_name: str, event_type: EventType,
                    event_data: Optional[Mapping[str, Any]] = None) -> "Optional[Future[DeliveryResult]]":
        """
        Track an event

        Returns:
            Future for the send, or None if the event was queued or dropped
        """
        try:
            event_type = EventType(event_type)
        except (TypeError, ValueError):
            log.warning("Unknown event type %r - dropping event: %s", event_type, event_name)
            return None

        record = EventRecord(event_name, event_type, dict(event_data or {}))
        with self._state_lock:
            if self._state is not TrackerState.READY:
                if self.queue.append(record):
                    log.debug("Tracker not initialized - event is placed in queue: %s", event_name)
                return None
        return self._dispatch(record)

    def _dispatch(self, record: EventRecord) -> "Future[DeliveryResult]":
        return self.dispatcher.send(
            record.name,
            record.with_type(),
            lifecycle=record.type is EventType.LIFECYCLE,
        )

    # Global event data ---------------------------------------------------

    def set_global_event_data(self, data: Mapping[str, Any]):
        """Replace the global event data"""
        self.global_data.replace(data)

    def update_global_event_data(self, changes: Mapping[str, Any]):
        """Patch the global event data; None values remove keys"""
        self.global_data.update(changes)

    def get_global_event_data(self) -> Dict[str, Any]:
        return self.global_data.snapshot()

    # Identity ------------------------------------------------------------

    def get_device_id(self) -> str:
        return self.identity.get_device_id()

    def get_session_id(self) -> str:
        return self.identity.get_session_id()

    # Settings ------------------------------------------------------------

    def set_preview_header(self, value: Optional[str]):
        self.config.preview_header = value

    def set_device_id_cookie_name(self, name: str):
        self.config.device_id_cookie_name = name

    def get_device_id_cookie_name(self) -> str:
        return self.config.device_id_cookie_name

    def set_session_id_cookie_name(self, name: str):
        self.config.session_id_cookie_name = name

    def get_session_id_cookie_name(self) -> str:
        return self.config.session_id_cookie_name

    def set_webview_url(self, url: str):
        self.config.webview_url = url

    def get_webview_url(self) -> str:
        return self.config.webview_url or ""

    @staticmethod
    def get_root_domain(url: str) -> str:
        return get_root_domain(url)

    def get_user_info(self) -> Dict[str, Any]:
        """Stored identity and launch stats (for a settings/about screen)"""
        return {
            "device_id": self.get_device_id(),
            "install_time": self.identity.install_time(),
            "launch_count": self.store.value(KEY_LAUNCH_COUNTER, 1, type=int),
            "initialized": self.is_initialized,
        }
