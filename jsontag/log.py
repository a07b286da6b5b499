"""
Tracker logging

Module loggers hang off the "jsontag" logger. Debug output can additionally be
written to a file on the Desktop so it is easy to find on test devices.
"""

import logging
from pathlib import Path
from typing import Optional

LOGGER_NAME = "jsontag"
LOG_FORMAT = "%(asctime)s [%(levelname)s] %(message)s"
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

DEFAULT_DEBUG_LOG = Path.home() / "Desktop" / "jsontag_debug.log"

log = logging.getLogger(LOGGER_NAME)
log.addHandler(logging.NullHandler())

_debug_handler: Optional[logging.Handler] = None


def get_logger(name: str) -> logging.Logger:
    """Child logger for a tracker module (e.g. "jsontag.dispatcher")"""
    if name.startswith(LOGGER_NAME):
        return logging.getLogger(name)
    return log.getChild(name)


def enable_debug_log(log_file: Optional[Path] = None) -> Optional[Path]:
    """
    Write DEBUG-level tracker output to a file

    Args:
        log_file: Target file (default: ~/Desktop/jsontag_debug.log)

    Returns:
        Path of the log file, or None if it could not be opened
    """
    global _debug_handler

    target = Path(log_file) if log_file else DEFAULT_DEBUG_LOG
    if _debug_handler is not None:
        return target

    try:
        target.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(str(target), encoding="utf-8")
    except OSError as e:
        log.warning("Could not open debug log %s: %s", target, e)
        return None

    handler.setLevel(logging.DEBUG)
    handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt=DATE_FORMAT))
    log.addHandler(handler)
    log.setLevel(logging.DEBUG)
    _debug_handler = handler
    log.debug("Debug log enabled: %s", target)
    return target


def disable_debug_log():
    """Detach the debug file handler if one is attached"""
    global _debug_handler

    if _debug_handler is None:
        return
    log.removeHandler(_debug_handler)
    _debug_handler.close()
    _debug_handler = None
    log.setLevel(logging.NOTSET)


def short_id(value: Optional[str]) -> str:
    """Truncate identifiers for log output"""
    if not value:
        return "<none>"
    return f"{value[:8]}..."
