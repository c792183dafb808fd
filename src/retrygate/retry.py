from __future__ import annotations

from typing import Optional

import structlog

from retrygate.backoff import Backoff
from retrygate.utils.time import MILLISECOND, Clock, ns_until, utc_now_ns


class Retry:
    """
    Rate-limiting gate on top of a Backoff.

    allow() answers "may I attempt now?": None means go ahead (and the next
    window is scheduled), an instant (epoch ns) means wait until then.
    Call reset() after a success to start over from the minimum delay.

    Nothing here sleeps; the caller decides how to wait:

        retry = Retry(Backoff(BackoffConfig(max_attempts=5)))
        while True:
            next_at = retry.allow()
            if next_at is not None:
                time.sleep(ns_to_s(retry.remaining()))
                continue
            if do_something():
                retry.reset()
                break

    Not safe for concurrent use. Mutating backoff directly can make last()
    inaccurate.
    """

    def __init__(self, backoff: Optional[Backoff] = None, clock: Optional[Clock] = None):
        self.backoff = backoff if backoff is not None else Backoff()
        self._clock = clock or utc_now_ns
        self._log = structlog.get_logger("retry")

        self.next: Optional[int] = None  # epoch ns, None = no limit
        self._last_delay: int = 0

    # ---------------------------- public API ---------------------------- #

    def allow(self, now: Optional[int] = None) -> Optional[int]:
        """
        Return None if an attempt may start now (consuming one backoff step),
        else the epoch-ns instant it will be allowed. A limited call changes
        nothing. MaxAttemptsExceeded from the backoff propagates as is.
        """
        if now is None:
            now = self._clock()
        if self.next is not None and now < self.next:
            self._log.debug("retry_limited", wait_ms=(self.next - now) / MILLISECOND)
            return self.next

        delay = self.backoff.duration()
        self.next = now + delay
        self._last_delay = delay
        self._log.debug("retry_allowed", attempt=self.backoff.attempt, delay_ms=delay / MILLISECOND)
        return None

    def reset(self) -> None:
        """Clear the attempt count and any pending limit. Typically called after a success."""
        self.backoff.reset()
        self.next = None
        self._last_delay = 0
        self._log.debug("retry_reset")

    def last(self) -> Optional[int]:
        """Epoch ns of the most recent permitted attempt, or None if there was none."""
        if self.next is None:
            return None
        return self.next - self._last_delay

    def remaining(self, now: Optional[int] = None) -> int:
        """Nanoseconds until the next attempt is allowed (0 if allowed now)."""
        if self.next is None:
            return 0
        return ns_until(self.next, self._clock() if now is None else now)
