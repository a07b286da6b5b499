"""In-process store (tests, short-lived scripts)"""

from typing import Any, Dict, List, Optional

from .base import KeyValueStore, _MISSING


class MemoryStore(KeyValueStore):
    """Dictionary-backed store; nothing survives the process"""

    def __init__(self, namespace: str = "jsontag", initial: Optional[Dict[str, Any]] = None):
        super().__init__(namespace)
        self._data: Dict[str, Any] = dict(initial or {})

    def _get_raw(self, key: str) -> Any:
        return self._data.get(key, _MISSING)

    def _set_raw(self, key: str, value: Any):
        self._data[key] = value

    def _remove_raw(self, key: str):
        self._data.pop(key, None)

    def _keys(self) -> List[str]:
        return list(self._data)

    def snapshot(self) -> Dict[str, Any]:
        """Copy of the stored values"""
        with self._lock:
            return dict(self._data)
