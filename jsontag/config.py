"""
Tracker configuration

TrackerConfig holds everything the tracker needs to reach the collection
endpoint. load_config() builds one from an optional Python module
(tracker_config.py, see tracker_config.example.py) so credentials and
endpoints stay out of the source tree.
"""

import importlib
from dataclasses import dataclass, fields
from typing import Optional

from .log import get_logger

log = get_logger("config")

IDENTITY_COOKIE = "cookie"
IDENTITY_INLINE = "inline"
IDENTITY_TRANSPORTS = (IDENTITY_COOKIE, IDENTITY_INLINE)


@dataclass
class TrackerConfig:
    """Endpoint, identity and timing settings for a Tracker"""

    endpoint: str
    path: str = ""
    device_id_cookie_name: str = "fp_device_id"
    session_id_cookie_name: str = "fp_session_id"
    session_timeout_minutes: int = 30
    launch_timeout_minutes: int = 5
    preview_header: Optional[str] = None
    webview_url: Optional[str] = None

    # How device/session ids travel: Cookie header or inline body fields
    identity_transport: str = IDENTITY_COOKIE
    # Override for first_launch/launch events; None follows identity_transport
    lifecycle_identity_transport: Optional[str] = None

    platform_tag: str = "python app"
    app_name: str = "JSON Tag Tracker"
    app_version: str = "1.0"
    install_time: Optional[int] = None

    max_queue_size: int = 1000
    request_timeout: float = 5
    background: bool = True
    debug: bool = False

    def __post_init__(self):
        for name in ("identity_transport", "lifecycle_identity_transport"):
            value = getattr(self, name)
            if value is not None and value not in IDENTITY_TRANSPORTS:
                raise ValueError(f"{name} must be one of {IDENTITY_TRANSPORTS}, got {value!r}")

    @property
    def url(self) -> str:
        """Full collection URL (endpoint + path)"""
        return f"{self.endpoint}{self.path}"

    def transport_for(self, lifecycle: bool) -> str:
        """Identity transport to use for a regular or lifecycle event"""
        if lifecycle and self.lifecycle_identity_transport:
            return self.lifecycle_identity_transport
        return self.identity_transport


def load_config(module_name: str = "tracker_config") -> Optional[TrackerConfig]:
    """
    Load tracker settings from a config module

    Returns:
        TrackerConfig, or None if the module is missing or has no endpoint
    """
    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        log.info("%s.py not found - tracking disabled: %s", module_name, e)
        return None

    endpoint = getattr(module, "ENDPOINT", None)
    if not endpoint:
        log.warning("%s.py has no ENDPOINT - tracking disabled", module_name)
        return None

    # Module attributes are the upper-case field names, e.g. SESSION_TIMEOUT_MINUTES
    kwargs = {}
    for field in fields(TrackerConfig):
        attr = field.name.upper()
        if hasattr(module, attr):
            kwargs[field.name] = getattr(module, attr)

    try:
        config = TrackerConfig(**kwargs)
    except (TypeError, ValueError) as e:
        log.error("Invalid tracker configuration in %s.py: %s", module_name, e)
        return None

    log.debug("Loaded tracker config for %s", config.url)
    return config
