"""
HTTP Transport

Posts serialized events to the collection endpoint and hands back the
status and body. Failures are reported in the result, never raised.
"""

import platform
import ssl
import sys
import urllib.error
import urllib.request
from dataclasses import dataclass
from typing import Dict, Optional

import certifi

from .log import get_logger

log = get_logger("transport")

# Use certifi for SSL verification in PyInstaller builds
SSL_CONTEXT = ssl.create_default_context(cafile=certifi.where())


@dataclass
class HTTPResult:
    """Outcome of one POST"""

    status: Optional[int] = None
    body: Optional[str] = None
    error: Optional[str] = None

    @property
    def ok(self) -> bool:
        return self.error is None and self.status is not None and 200 <= self.status < 300


def build_user_agent(app_name: str, app_version: str) -> str:
    """e.g. "JSON Tag Tracker/1.0 (macOS 15.4; Python 3.12.1)" """
    os_name = platform.system()
    if os_name == "Darwin":
        os_name = "macOS"
        os_version = platform.mac_ver()[0] or platform.release()
    else:
        os_version = platform.release()
    python_version = f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}"
    return f"{app_name}/{app_version} ({os_name} {os_version}; Python {python_version})"


class HTTPTransport:
    """urllib-based POST client for the collection endpoint"""

    def __init__(self, user_agent: Optional[str] = None, timeout: float = 5):
        """
        Args:
            user_agent: User-Agent header sent with every request
            timeout: Socket timeout in seconds
        """
        self.user_agent = user_agent
        self.timeout = timeout

    def post(self, url: str, payload: bytes, headers: Optional[Dict[str, str]] = None) -> HTTPResult:
        """
        POST a JSON payload

        Args:
            url: Collection URL
            payload: Serialized JSON body
            headers: Extra headers (Cookie, preview header, ...)

        Returns:
            HTTPResult with status/body, or error set on connection failure
        """
        request_headers = {"Content-Type": "application/json"}
        if self.user_agent:
            request_headers["User-Agent"] = self.user_agent
        request_headers.update(headers or {})

        try:
            req = urllib.request.Request(
                url,
                data=payload,
                headers=request_headers,
                method='POST'
            )

            with urllib.request.urlopen(req, timeout=self.timeout, context=SSL_CONTEXT) as response:
                body = response.read().decode("utf-8", errors="replace")
                return HTTPResult(status=response.status, body=body)

        except urllib.error.HTTPError as e:
            try:
                error_body = e.read().decode("utf-8", errors="replace")
            except OSError:
                error_body = None
            log.debug("HTTP error body: %s", error_body)
            return HTTPResult(status=e.code, body=error_body)
        except urllib.error.URLError as e:
            return HTTPResult(error=f"connection error: {e.reason}")
        except (OSError, ValueError) as e:
            # socket timeouts, reset connections, malformed URLs
            return HTTPResult(error=f"{type(e).__name__}: {e}")
