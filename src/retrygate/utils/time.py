from __future__ import annotations

import time
from typing import Callable

# --- duration units (integer nanoseconds) ---

NANOSECOND = 1
MICROSECOND = 1_000 * NANOSECOND
MILLISECOND = 1_000 * MICROSECOND
SECOND = 1_000 * MILLISECOND
MINUTE = 60 * SECOND

Clock = Callable[[], int]  # returns unix epoch nanoseconds

def utc_now_ns() -> int:
    """Unix epoch nanoseconds (int)."""
    return time.time_ns()

def ns_to_s(ns: int) -> float:
    """Nanoseconds -> float seconds."""
    return ns / SECOND

def s_to_ns(s: float) -> int:
    """Float seconds -> nanoseconds, truncated toward zero."""
    return int(s * SECOND)

def ms_to_ns(ms: float) -> int:
    """Float milliseconds -> nanoseconds, truncated toward zero."""
    return int(ms * MILLISECOND)

def ns_until(target_ns: int, now_ns: int | None = None) -> int:
    """Non-negative time until target (clamped at 0)."""
    now = utc_now_ns() if now_ns is None else now_ns
    return max(0, target_ns - now)
