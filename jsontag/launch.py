"""
Launch Tracker

Detects the first launch after install and emits a "launch" event whenever
the app returns to the foreground after being away longer than the launch
timeout.
"""

from typing import Callable, Optional

from .dispatcher import DeliveryResult, Dispatcher
from .identity import IdentityManager
from .log import get_logger
from .payload import EventType
from .storage.base import KeyValueStore
from .timeutil import Clock, current_time_millis, format_install_date, minutes_to_millis, whole_days_between

log = get_logger("launch")

KEY_IS_FIRST_LAUNCH = "is_first_launch"
KEY_LAST_LAUNCH_TIME = "last_launch_time"
KEY_LAUNCH_COUNTER = "launch_counter"

FIRST_LAUNCH_EVENT = "first_launch"
LAUNCH_EVENT = "launch"


class LaunchTracker:
    """First-install detection and periodic launch events"""

    def __init__(self, store: KeyValueStore, identity: IdentityManager, dispatcher: Dispatcher,
                 track_event: Callable, launch_timeout_minutes: int = 5,
                 clock: Clock = current_time_millis):
        """
        Args:
            store: Persistence backend
            identity: Identity manager (source of the install time)
            dispatcher: Used directly for first_launch, which bypasses the ready gate
            track_event: Tracker.track_event, used for regular launch events
            launch_timeout_minutes: Minimum background time before a new launch counts
            clock: Millisecond clock (injectable for tests)
        """
        self.store = store
        self.identity = identity
        self.dispatcher = dispatcher
        self.track_event = track_event
        self.launch_timeout_minutes = launch_timeout_minutes
        self.clock = clock

    def is_first_launch(self) -> bool:
        return self.store.value(KEY_IS_FIRST_LAUNCH, True, type=bool)

    def track_first_launch(self, on_complete: Callable[[], None]):
        """
        Emit first_launch once per install, then call on_complete

        on_complete runs after the send finishes (whatever the outcome), or
        immediately if this is not the first launch.
        """
        with self.store.transaction() as store:
            first_launch = store.value(KEY_IS_FIRST_LAUNCH, True, type=bool)
            if first_launch:
                # The install launch is launch number 1
                store.set_value(KEY_IS_FIRST_LAUNCH, False)
                store.set_value(KEY_LAST_LAUNCH_TIME, self.clock())

        if not first_launch:
            on_complete()
            return

        launch_data = {
            "launch": {
                "install_date": format_install_date(self.identity.install_time()),
                "number": 1,
            }
        }
        log.info("First launch detected - sending %s", FIRST_LAUNCH_EVENT)

        def _done(result: DeliveryResult):
            if not result.delivered:
                log.warning("%s was not delivered (%s)", FIRST_LAUNCH_EVENT,
                            result.error or f"HTTP {result.status}")
            on_complete()

        self.dispatcher.send(FIRST_LAUNCH_EVENT, launch_data, lifecycle=True, on_complete=_done)

    def has_launch_timeout_passed(self, now: Optional[int] = None) -> bool:
        """Whether the app was away longer than the launch timeout"""
        now = self.clock() if now is None else now
        last_launch_time = self.store.value(KEY_LAST_LAUNCH_TIME, 0, type=int)
        return now - last_launch_time > minutes_to_millis(self.launch_timeout_minutes)

    def on_foreground(self) -> bool:
        """
        Handle a foreground transition

        Returns:
            True if a launch event was emitted
        """
        log.debug("App is in foreground")
        now = self.clock()
        tracked = False

        if not self.is_first_launch():
            tracked = self._check_and_track_launch(now)

        # last_launch_time is refreshed on every foreground, launch or not
        with self.store.transaction() as store:
            store.set_value(KEY_IS_FIRST_LAUNCH, False)
            store.set_value(KEY_LAST_LAUNCH_TIME, now)
        return tracked

    def _check_and_track_launch(self, now: int) -> bool:
        with self.store.transaction() as store:
            if not self.has_launch_timeout_passed(now):
                log.debug("Launch event not tracked - timeout not exceeded")
                return False

            last_launch_time = store.value(KEY_LAST_LAUNCH_TIME, 0, type=int)
            launch_counter = store.value(KEY_LAUNCH_COUNTER, 1, type=int) + 1
            store.set_value(KEY_LAUNCH_COUNTER, launch_counter)
            store.set_value(KEY_LAST_LAUNCH_TIME, now)

        install_time = self.identity.install_time()
        days_since_last_use = whole_days_between(last_launch_time, now) if last_launch_time else 0
        launch_data = {
            "launch": {
                "number": launch_counter,
                "days_since_first_use": whole_days_between(install_time, now),
                "days_since_last_use": days_since_last_use,
            }
        }
        log.info("Launch event tracked after timeout of %s minutes", self.launch_timeout_minutes)
        self.track_event(LAUNCH_EVENT, EventType.LIFECYCLE, launch_data)
        return True
