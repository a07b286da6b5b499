"""
Key-value store contract

Durable string/int/bool storage keyed by namespace. Every implementation
guards its data with a re-entrant lock; multi-step read-modify-write updates
go through transaction() so completion callbacks on worker threads cannot
interleave with foreground calls.
"""

import threading
from contextlib import contextmanager
from typing import Any, Iterator, List, Optional

_MISSING = object()

_TRUE_STRINGS = ("true", "1", "yes", "on")


def _coerce(raw: Any, default: Any, type_: Optional[type]) -> Any:
    """Convert a stored value to the requested type, falling back to default"""
    if type_ is None or raw is None:
        return raw
    if type_ is bool:
        if isinstance(raw, str):
            return raw.strip().lower() in _TRUE_STRINGS
        return bool(raw)
    try:
        return type_(raw)
    except (TypeError, ValueError):
        return default


class KeyValueStore:
    """Base class for tracker persistence backends"""

    def __init__(self, namespace: str = "jsontag"):
        self.namespace = namespace
        self._lock = threading.RLock()

    # Backend hooks -------------------------------------------------------

    def _get_raw(self, key: str) -> Any:
        raise NotImplementedError

    def _set_raw(self, key: str, value: Any):
        raise NotImplementedError

    def _remove_raw(self, key: str):
        raise NotImplementedError

    def _keys(self) -> List[str]:
        raise NotImplementedError

    def _commit(self):
        """Flush pending writes to durable storage (no-op by default)"""

    # Public API ----------------------------------------------------------

    def value(self, key: str, default: Any = None, type: Optional[type] = None) -> Any:
        """
        Read a value

        Args:
            key: Store key
            default: Returned when the key is missing or cannot be converted
            type: Optional target type (str, int, float, bool)
        """
        with self._lock:
            raw = self._get_raw(key)
        if raw is _MISSING:
            return default
        return _coerce(raw, default, type)

    def set_value(self, key: str, value: Any):
        with self._lock:
            self._set_raw(key, value)
            self._commit()

    def remove(self, key: str):
        with self._lock:
            if self._get_raw(key) is not _MISSING:
                self._remove_raw(key)
                self._commit()

    def contains(self, key: str) -> bool:
        with self._lock:
            return self._get_raw(key) is not _MISSING

    def keys(self) -> List[str]:
        with self._lock:
            return list(self._keys())

    def clear(self):
        with self._lock:
            for key in list(self._keys()):
                self._remove_raw(key)
            self._commit()

    @contextmanager
    def transaction(self) -> Iterator["KeyValueStore"]:
        """Hold the store lock across several reads and writes"""
        with self._lock:
            yield self
