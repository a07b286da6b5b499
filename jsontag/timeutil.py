"""Millisecond timestamps shared by identity and launch tracking."""

import time
from datetime import datetime
from typing import Callable

Clock = Callable[[], int]

MILLIS_PER_MINUTE = 60 * 1000
MILLIS_PER_DAY = 24 * 60 * MILLIS_PER_MINUTE


def current_time_millis() -> int:
    return int(time.time() * 1000)


def minutes_to_millis(minutes) -> int:
    return int(minutes * MILLIS_PER_MINUTE)


def whole_days_between(start_ms: int, end_ms: int) -> int:
    """Whole days elapsed, truncated toward zero like integer division on longs"""
    return int((end_ms - start_ms) / MILLIS_PER_DAY)


def format_install_date(time_ms: int) -> str:
    """M/D/YYYY without zero padding (e.g. 3/7/2025)"""
    date = datetime.fromtimestamp(time_ms / 1000)
    return f"{date.month}/{date.day}/{date.year}"
