"""
WebView cookie bridge

Lets an embedded browser share the app's analytics identity: the device and
session ids are handed over as first-party cookies scoped to the root domain
of the page being shown.
"""

from typing import TYPE_CHECKING, List
from urllib.parse import urlsplit

import tldextract

if TYPE_CHECKING:
    from .tracker import Tracker

DEFAULT_WEBVIEW_URL = "https://example.com"

# Bundled public suffix snapshot only; no network fetch, no cache directory
_extract = tldextract.TLDExtract(suffix_list_urls=(), cache_dir=None,
                                 include_psl_private_domains=True)


def get_root_domain(url: str) -> str:
    """
    Cookie domain for a URL: "." + the registrable domain of its host

    "https://sub.example.co.uk/x" -> ".example.co.uk". Returns "" for
    anything without a registrable domain (malformed URLs, IP addresses,
    localhost, bare public suffixes).
    """
    try:
        host = urlsplit(url).hostname
    except ValueError:
        return ""
    if not host:
        return ""

    parts = _extract(host)
    if not parts.domain or not parts.suffix:
        return ""
    return f".{parts.domain}.{parts.suffix}"


def webview_cookies(tracker: "Tracker") -> List[str]:
    """Cookie strings for the tracker's webview URL, one per known id"""
    url = tracker.get_webview_url() or DEFAULT_WEBVIEW_URL
    domain = get_root_domain(url)

    cookies = []
    device_id = tracker.get_device_id()
    if device_id:
        cookies.append(f"{tracker.get_device_id_cookie_name()}={device_id}; path=/; domain={domain}")
    session_id = tracker.get_session_id()
    if session_id:
        cookies.append(f"{tracker.get_session_id_cookie_name()}={session_id}; path=/; domain={domain}")
    return cookies
