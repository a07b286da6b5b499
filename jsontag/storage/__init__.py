"""Key-value store backends"""

from .base import KeyValueStore
from .memory import MemoryStore
from .jsonfile import JsonFileStore

__all__ = ['KeyValueStore', 'MemoryStore', 'JsonFileStore', 'QSettingsStore']


def __getattr__(name):
    # QSettingsStore pulls in PyQt6; only import it when asked for
    if name == 'QSettingsStore':
        from .qsettings import QSettingsStore
        return QSettingsStore
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
