"""
Identity Manager

Owns the device id and session id. The device id is whatever the collection
server last assigned and is kept indefinitely; the session id expires after
a period of inactivity and is reissued by the server on the next response.
"""

import json
from typing import Optional

from .log import get_logger, short_id
from .storage.base import KeyValueStore
from .timeutil import Clock, current_time_millis, minutes_to_millis

log = get_logger("identity")

KEY_DEVICE_ID = "device_id"
KEY_SESSION_ID = "session_id"
KEY_LAST_ACTIVITY_TIME = "last_activity_time"
KEY_INSTALL_TIME = "install_time"


class IdentityManager:
    """Device/session identity persisted in a key-value store"""

    def __init__(self, store: KeyValueStore, session_timeout_minutes: int = 30,
                 clock: Clock = current_time_millis, install_time: Optional[int] = None):
        """
        Args:
            store: Persistence backend
            session_timeout_minutes: Inactivity after which the session expires
            clock: Millisecond clock (injectable for tests)
            install_time: First-install timestamp from the host, if it knows one
        """
        self.store = store
        self.session_timeout_minutes = session_timeout_minutes
        self.clock = clock
        self._host_install_time = install_time

    def get_device_id(self) -> str:
        """Stored device id, or "" if the server never assigned one"""
        return self.store.value(KEY_DEVICE_ID, "", type=str) or ""

    def get_session_id(self) -> str:
        """
        Current session id, or "" if the session has expired

        An expired session only refreshes last_activity_time; the new id
        comes from the server's next response.
        """
        timeout = minutes_to_millis(self.session_timeout_minutes)
        with self.store.transaction() as store:
            now = self.clock()
            last_activity = store.value(KEY_LAST_ACTIVITY_TIME, 0, type=int)
            if now - last_activity > timeout:
                store.set_value(KEY_LAST_ACTIVITY_TIME, now)
                log.debug("Session expired (idle %d ms)", now - last_activity)
                return ""
            return store.value(KEY_SESSION_ID, "", type=str) or ""

    def record_identity_from_response(self, body: Optional[str]) -> bool:
        """
        Adopt device_id/session_id from a collection response

        Returns:
            True if anything was stored
        """
        if not body:
            return False

        try:
            data = json.loads(body)
        except ValueError as e:
            log.error("Error while extracting identity from response: %s", e)
            return False
        if not isinstance(data, dict):
            log.error("Error while extracting identity: response is not a JSON object")
            return False

        device_id = data.get(KEY_DEVICE_ID)
        session_id = data.get(KEY_SESSION_ID)
        updated = False

        with self.store.transaction() as store:
            if isinstance(device_id, str):
                store.set_value(KEY_DEVICE_ID, device_id)
                updated = True
            if isinstance(session_id, str):
                store.set_value(KEY_SESSION_ID, session_id)
                store.set_value(KEY_LAST_ACTIVITY_TIME, self.clock())
                updated = True

        if updated:
            log.debug("Identity updated (device: %s, session: %s)",
                      short_id(device_id), short_id(session_id))
        return updated

    def install_time(self) -> int:
        """First-install timestamp in ms, recorded once and never changed"""
        with self.store.transaction() as store:
            stored = store.value(KEY_INSTALL_TIME, None, type=int)
            if stored is not None:
                return stored
            install_time = self._host_install_time or self.clock()
            store.set_value(KEY_INSTALL_TIME, install_time)
            return install_time

    def clear(self):
        """Forget device and session identity"""
        with self.store.transaction() as store:
            store.remove(KEY_DEVICE_ID)
            store.remove(KEY_SESSION_ID)
            store.remove(KEY_LAST_ACTIVITY_TIME)
        log.info("Identity cleared")
