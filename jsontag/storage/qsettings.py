"""
QSettings store

Uses the platform's native settings location (plist on macOS, registry on
Windows, INI on Linux), the same place a Qt desktop app keeps its
preferences.
"""

from typing import Any, List, Optional

from PyQt6.QtCore import QSettings

from .base import KeyValueStore, _MISSING


class QSettingsStore(KeyValueStore):
    """Store backed by a QSettings group named after the namespace"""

    def __init__(self, organization: str, application: str,
                 namespace: str = "jsontag", settings: Optional[QSettings] = None):
        """
        Args:
            organization: QSettings organization name
            application: QSettings application name
            namespace: Settings group holding the tracker keys
            settings: Existing QSettings object to reuse (optional)
        """
        super().__init__(namespace)
        self.settings = settings if settings is not None else QSettings(organization, application)

    def _key(self, key: str) -> str:
        return f"{self.namespace}/{key}"

    def _get_raw(self, key: str) -> Any:
        full_key = self._key(key)
        if not self.settings.contains(full_key):
            return _MISSING
        return self.settings.value(full_key)

    def _set_raw(self, key: str, value: Any):
        self.settings.setValue(self._key(key), value)

    def _remove_raw(self, key: str):
        self.settings.remove(self._key(key))

    def _keys(self) -> List[str]:
        self.settings.beginGroup(self.namespace)
        try:
            return list(self.settings.childKeys())
        finally:
            self.settings.endGroup()

    def _commit(self):
        self.settings.sync()
