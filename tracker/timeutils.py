"""Millisecond epoch helpers shared by the engines and the storage layer."""

import time
from datetime import date, datetime

DAY_MS = 24 * 60 * 60 * 1000


def now_ms() -> int:
    """Current wall-clock time in milliseconds since the epoch"""
    return int(time.time() * 1000)


def day_key(timestamp_ms: int) -> date:
    """Local calendar date of a millisecond timestamp"""
    return datetime.fromtimestamp(timestamp_ms / 1000).date()


def days_between(later_ms: int, earlier_ms: int) -> float:
    """Real-valued day difference, never negative"""
    return max(0.0, (later_ms - earlier_ms) / DAY_MS)
