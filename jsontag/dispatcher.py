"""
Event Queue & Dispatcher

EventQueue buffers tracking calls made before the tracker is ready.
Dispatcher turns an event into a POST: merge global data, attach identity,
serialize, send on a worker thread and adopt any identity the server hands
back. Delivery is attempted once; failures are logged and dropped.
"""

import threading
from concurrent.futures import Future, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Any, Callable, Dict, List, Mapping, Optional

from .config import IDENTITY_INLINE, TrackerConfig
from .identity import IdentityManager
from .log import get_logger, short_id
from .payload import EventRecord, build_body, merge_event_data, serialize
from .transport import HTTPResult, HTTPTransport, build_user_agent

log = get_logger("dispatcher")

PREVIEW_HEADER = "X-Gtm-Server-Preview"
INLINE_DEVICE_FIELD = "client_id"
INLINE_SESSION_FIELD = "session_id"
SHUT_DOWN_ERROR = "dispatcher shut down"


def _loggable(body: Mapping[str, Any]) -> Dict[str, Any]:
    """Request body with inline identifiers truncated"""
    shown = dict(body)
    for field in (INLINE_DEVICE_FIELD, INLINE_SESSION_FIELD):
        if shown.get(field):
            shown[field] = short_id(shown[field])
    return shown


class EventQueue:
    """Bounded FIFO of events tracked before initialization completes"""

    def __init__(self, max_size: int = 1000):
        self.max_size = max_size
        self._events: List[EventRecord] = []
        self._lock = threading.Lock()

    def append(self, record: EventRecord) -> bool:
        """Queue an event. Returns False if the queue is full and it was dropped."""
        with self._lock:
            if self.max_size and len(self._events) >= self.max_size:
                log.warning("Event queue full (%d) - dropping event: %s", self.max_size, record.name)
                return False
            self._events.append(record)
            return True

    def drain(self) -> List[EventRecord]:
        """Remove and return every queued event in enqueue order"""
        with self._lock:
            events, self._events = self._events, []
        return events

    def __len__(self):
        with self._lock:
            return len(self._events)


class GlobalEventData:
    """Fields merged into every outgoing event"""

    def __init__(self, data: Optional[Mapping[str, Any]] = None):
        self._data: Dict[str, Any] = dict(data or {})
        self._lock = threading.Lock()

    def replace(self, data: Mapping[str, Any]):
        with self._lock:
            self._data = dict(data)

    def update(self, changes: Mapping[str, Any]):
        """Apply changes; a None value deletes the key"""
        with self._lock:
            for key, value in changes.items():
                if value is None:
                    self._data.pop(key, None)
                else:
                    self._data[key] = value
            log.debug("GlobalEventData after update: %s", self._data)

    def snapshot(self) -> Dict[str, Any]:
        with self._lock:
            return dict(self._data)


@dataclass
class DeliveryResult:
    """What happened to one send attempt"""

    event_name: str
    status: Optional[int] = None
    error: Optional[str] = None
    identity_updated: bool = False

    @property
    def delivered(self) -> bool:
        return self.error is None and self.status is not None and 200 <= self.status < 300


class Dispatcher:
    """Serializes events and posts them to the collection endpoint"""

    def __init__(self, config: TrackerConfig, identity: IdentityManager,
                 global_data: GlobalEventData, transport: Optional[HTTPTransport] = None,
                 max_workers: int = 1):
        """
        Args:
            config: Tracker configuration (read at send time, so setters apply)
            identity: Identity manager supplying and receiving ids
            global_data: Shared global event data
            transport: HTTP transport (default: HTTPTransport with custom User-Agent)
            max_workers: Worker threads for background sends (1 keeps delivery in order)
        """
        self.config = config
        self.identity = identity
        self.global_data = global_data
        self.transport = transport or HTTPTransport(
            user_agent=build_user_agent(config.app_name, config.app_version),
            timeout=config.request_timeout,
        )
        self._max_workers = max_workers
        self._executor: Optional[ThreadPoolExecutor] = None
        self._executor_lock = threading.Lock()
        self._closed = False

    def _get_executor(self) -> Optional[ThreadPoolExecutor]:
        """Worker pool, created on first use; None once shut down"""
        with self._executor_lock:
            if self._closed:
                return None
            if self._executor is None:
                self._executor = ThreadPoolExecutor(
                    max_workers=self._max_workers, thread_name_prefix="jsontag-send"
                )
            return self._executor

    def build_request(self, event_name: str, event_data: Mapping[str, Any],
                      lifecycle: bool = False) -> Dict[str, Any]:
        """
        Assemble the body and headers for one event

        Identity is read here, on the caller's thread, so session expiry is
        evaluated at tracking time rather than when a worker gets to it.
        """
        device_id = self.identity.get_device_id()
        session_id = self.identity.get_session_id()

        combined = merge_event_data(self.global_data.snapshot(), event_data)
        body = build_body(event_name, combined, self.config.platform_tag)

        headers: Dict[str, str] = {}
        if self.config.transport_for(lifecycle) == IDENTITY_INLINE:
            if device_id:
                body[INLINE_DEVICE_FIELD] = device_id
            if session_id:
                body[INLINE_SESSION_FIELD] = session_id
        else:
            cookies = []
            if device_id:
                cookies.append(f"{self.config.device_id_cookie_name}={device_id}")
            if session_id:
                cookies.append(f"{self.config.session_id_cookie_name}={session_id}")
            if cookies:
                headers["Cookie"] = "; ".join(cookies)

        if self.config.preview_header:
            headers[PREVIEW_HEADER] = self.config.preview_header

        return {"url": self.config.url, "body": body, "headers": headers}

    def send(self, event_name: str, event_data: Mapping[str, Any], lifecycle: bool = False,
             on_complete: Optional[Callable[[DeliveryResult], None]] = None) -> "Future[DeliveryResult]":
        """
        Send one event without blocking the caller

        Args:
            event_name: Value of the event_name field
            event_data: Event-local data (wins over global data)
            lifecycle: True for first_launch/launch events
            on_complete: Called with the DeliveryResult on success or failure

        Returns:
            Future resolving to the DeliveryResult (never to an exception)
        """
        request = self.build_request(event_name, event_data, lifecycle)
        log.debug("Request json: %s", _loggable(request["body"]))

        if self.config.background:
            future = self._submit(event_name, request)
        elif self._closed:
            future = self._rejected(event_name)
        else:
            future = Future()
            future.set_result(self._deliver(event_name, request))

        if on_complete is not None:
            future.add_done_callback(lambda f: self._run_callback(on_complete, f.result()))
        return future

    def _submit(self, event_name: str, request: Dict[str, Any]) -> "Future[DeliveryResult]":
        executor = self._get_executor()
        if executor is None:
            return self._rejected(event_name)
        try:
            return executor.submit(self._deliver, event_name, request)
        except RuntimeError:
            # shut down between lookup and submit
            return self._rejected(event_name)

    @staticmethod
    def _rejected(event_name: str) -> "Future[DeliveryResult]":
        log.warning("Dispatcher shut down - dropping event: %s", event_name)
        future = Future()
        future.set_result(DeliveryResult(event_name, error=SHUT_DOWN_ERROR))
        return future

    def _deliver(self, event_name: str, request: Dict[str, Any]) -> DeliveryResult:
        try:
            return self._post(event_name, request)
        except Exception as e:
            # Silently fail - don't interrupt the host application
            log.exception("Unexpected error while sending %s", event_name)
            return DeliveryResult(event_name, error=f"unexpected error: {e}")

    def _post(self, event_name: str, request: Dict[str, Any]) -> DeliveryResult:
        try:
            payload = serialize(request["body"])
        except (TypeError, ValueError) as e:
            log.error("Could not serialize event %s: %s", event_name, e)
            return DeliveryResult(event_name, error=f"serialization error: {e}")

        result: HTTPResult = self.transport.post(request["url"], payload, request["headers"])

        if result.error:
            log.error("Error while sending %s: %s", event_name, result.error)
            return DeliveryResult(event_name, error=result.error)
        if not result.ok:
            log.warning("Event %s rejected: HTTP %s", event_name, result.status)
            return DeliveryResult(event_name, status=result.status)

        log.debug("Response received for %s (HTTP %s)", event_name, result.status)
        updated = self.identity.record_identity_from_response(result.body)
        log.info("Event sent: %s (device: %s)", event_name, short_id(self.identity.get_device_id()))
        return DeliveryResult(event_name, status=result.status, identity_updated=updated)

    @staticmethod
    def _run_callback(callback: Callable[[DeliveryResult], None], result: DeliveryResult):
        try:
            callback(result)
        except Exception:
            log.exception("Send completion callback failed for %s", result.event_name)

    def shutdown(self, wait: bool = True):
        """
        Stop the worker pool; in-flight sends finish if wait is True

        Later sends are not attempted and resolve with an error result.
        """
        with self._executor_lock:
            self._closed = True
            executor, self._executor = self._executor, None
        if executor is not None:
            executor.shutdown(wait=wait)
