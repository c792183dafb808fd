from __future__ import annotations

import math
import random
from typing import Iterator, Optional

import structlog

from retrygate.config import BackoffConfig
from retrygate.errors import MaxAttemptsExceeded

log = structlog.get_logger("backoff")


class Backoff:
    """
    Exponential backoff counter over integer-nanosecond durations.

    Delay for attempt n is min * factor**n, capped at max and truncated
    toward zero. With jitter on, the delay is drawn uniformly from
    [min, that value] (both ends inclusive).

    duration() hands out the delay for the current attempt and bumps the
    attempt index; reset() puts it back to 0. for_attempt() computes
    without touching state.

    Not safe for concurrent use.

    Usage:
        b = Backoff(BackoffConfig(min_ns=100 * MILLISECOND, max_ns=10 * SECOND))
        b.duration()  # 100ms
        b.duration()  # 200ms
        b.reset()
    """
    __slots__ = ("config", "min_ns", "max_ns", "factor", "jitter", "max_attempts", "_attempt", "_rng")

    def __init__(self, cfg: Optional[BackoffConfig] = None, rng: Optional[random.Random] = None):
        # keep the caller's config as given; work from a resolved copy
        self.config = cfg if cfg is not None else BackoffConfig()
        r = self.config.resolved()
        self.min_ns: int = r.min_ns
        self.max_ns: int = r.max_ns
        self.factor: float = r.factor
        self.jitter: bool = r.jitter
        self.max_attempts: int = r.max_attempts
        self._attempt = 0
        self._rng = rng if rng is not None else random

    @property
    def attempt(self) -> int:
        """Number of delays handed out since construction or the last reset()."""
        return self._attempt

    def for_attempt(self, n: int) -> int:
        """Delay (ns) for attempt n. Does not change the attempt index."""
        if n < 0:
            raise ValueError(f"attempt must be >= 0, got {n}")
        try:
            d = self.min_ns * math.pow(self.factor, n)
        except OverflowError:
            d = math.inf
        ns = self.max_ns if d >= self.max_ns else int(d)
        if self.jitter and ns > self.min_ns:
            ns = self._rng.randint(self.min_ns, ns)
        return ns

    def duration(self) -> int:
        """
        Delay (ns) for the current attempt, then advance the attempt index.
        Raises MaxAttemptsExceeded (leaving the index as is) once the cap is hit.
        """
        if self.max_attempts > 0 and self._attempt >= self.max_attempts:
            log.warning("backoff_max_attempts_exceeded", attempt=self._attempt, max_attempts=self.max_attempts)
            raise MaxAttemptsExceeded(self._attempt, self.max_attempts)
        d = self.for_attempt(self._attempt)
        self._attempt += 1
        return d

    def reset(self) -> None:
        """Back to attempt 0; the next duration() returns the minimum delay."""
        self._attempt = 0


def iter_delays(backoff: Backoff) -> Iterator[int]:
    """
    Iterator of successive backoff.duration() values; ends quietly at the
    attempt cap (runs forever when uncapped).
    """
    while True:
        try:
            d = backoff.duration()
        except MaxAttemptsExceeded:
            return
        yield d
