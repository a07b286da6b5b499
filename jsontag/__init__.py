"""
JSON Tag Tracker

Client-side analytics: queues events until initialized, keeps device and
session identity, merges global event data and posts JSON events to a
server-side tagging endpoint.
"""

from .config import TrackerConfig, load_config
from .dispatcher import DeliveryResult
from .payload import EventType
from .tracker import Tracker, TrackerState
from .webview import get_root_domain, webview_cookies

__version__ = "1.1.0"

__all__ = [
    'Tracker',
    'TrackerState',
    'TrackerConfig',
    'EventType',
    'DeliveryResult',
    'load_config',
    'get_root_domain',
    'webview_cookies',
]
