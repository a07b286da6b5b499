"""
JSON file store

Keeps one JSON document per namespace, e.g. ~/.jsontag/jsontag.json.
Writes go to a temp file first and are swapped in with os.replace so a crash
mid-write never leaves a truncated document behind.
"""

import json
import os
from pathlib import Path
from typing import Any, Dict, List, Optional

from ..log import get_logger
from .base import KeyValueStore, _MISSING

log = get_logger("storage")

DEFAULT_DIR = Path.home() / ".jsontag"


class JsonFileStore(KeyValueStore):
    """Store persisted to <directory>/<namespace>.json"""

    def __init__(self, namespace: str = "jsontag", directory: Optional[Path] = None):
        super().__init__(namespace)
        self.directory = Path(directory) if directory else DEFAULT_DIR
        self.path = self.directory / f"{namespace}.json"
        self._data: Dict[str, Any] = self._load()

    def _load(self) -> Dict[str, Any]:
        """Load the document from disk. Returns {} if missing or unreadable."""
        if not self.path.exists():
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                data = json.load(f)
        except (json.JSONDecodeError, OSError) as e:
            log.warning("Ignoring unreadable store file %s: %s", self.path, e)
            return {}
        if not isinstance(data, dict):
            log.warning("Ignoring store file %s: top level is not an object", self.path)
            return {}
        return data

    def _get_raw(self, key: str) -> Any:
        return self._data.get(key, _MISSING)

    def _set_raw(self, key: str, value: Any):
        self._data[key] = value

    def _remove_raw(self, key: str):
        self._data.pop(key, None)

    def _keys(self) -> List[str]:
        return list(self._data)

    def _commit(self):
        tmp_path = self.path.with_suffix(".json.tmp")
        try:
            self.directory.mkdir(parents=True, exist_ok=True)
            with open(tmp_path, "w", encoding="utf-8") as f:
                json.dump(self._data, f, indent=2)
            os.replace(tmp_path, self.path)
        except OSError as e:
            log.error("Failed to write store file %s: %s", self.path, e)
