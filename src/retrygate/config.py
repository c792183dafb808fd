from __future__ import annotations

import math
import os
from dataclasses import dataclass
from typing import Optional

from dotenv import find_dotenv, load_dotenv

from retrygate.errors import BackoffConfigError
from retrygate.utils.time import MILLISECOND, SECOND, ms_to_ns

DEFAULT_MIN_NS = 100 * MILLISECOND
DEFAULT_MAX_NS = 10 * SECOND
DEFAULT_FACTOR = 2.0

_TRUTHY = ("1", "true", "yes")


@dataclass(slots=True)
class BackoffConfig:
    """
    Caller-facing backoff settings. None (or 0) for min/max/factor means
    "use the default"; see resolved().
    """
    min_ns: Optional[int] = None
    max_ns: Optional[int] = None
    factor: Optional[float] = None
    jitter: bool = False
    max_attempts: int = 0  # 0 = unlimited

    def resolved(self) -> "BackoffConfig":
        """
        Return a new config with defaults applied and ranges checked.
        self is left untouched.
        """
        out = BackoffConfig(
            min_ns=int(self.min_ns) if self.min_ns else DEFAULT_MIN_NS,
            max_ns=int(self.max_ns) if self.max_ns else DEFAULT_MAX_NS,
            factor=float(self.factor) if self.factor else DEFAULT_FACTOR,
            jitter=bool(self.jitter),
            max_attempts=int(self.max_attempts or 0),
        )
        if out.min_ns < 0 or out.max_ns < 0:
            raise BackoffConfigError(f"durations must be non-negative (min={out.min_ns}, max={out.max_ns})")
        if out.min_ns > out.max_ns:
            raise BackoffConfigError(f"min ({out.min_ns}ns) exceeds max ({out.max_ns}ns)")
        if not math.isfinite(out.factor) or out.factor < 1.0:
            raise BackoffConfigError(f"factor must be >= 1, got {out.factor}")
        if out.max_attempts < 0:
            raise BackoffConfigError(f"max_attempts must be >= 0, got {out.max_attempts}")
        return out


# --------- env loading ----------

def _ms_to_ns(raw: str) -> int:
    return ms_to_ns(float(raw))


def _env(name: str, cast, default=None):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw.strip())
    except (ValueError, OverflowError) as e:
        raise BackoffConfigError(f"{name}={raw!r}: {e}") from e


def config_from_env(prefix: str = "BACKOFF_") -> BackoffConfig:
    """
    Build a BackoffConfig from environment variables. The nearest .env
    (searched upward from the working directory) is loaded first, without
    overriding variables already set:

      {prefix}MIN_MS        float milliseconds
      {prefix}MAX_MS        float milliseconds
      {prefix}FACTOR        float
      {prefix}JITTER        1/true/yes
      {prefix}MAX_ATTEMPTS  int, 0 = unlimited

    Unset variables leave the field unset so the defaults apply later.
    """
    load_dotenv(find_dotenv(usecwd=True))
    return BackoffConfig(
        min_ns=_env(f"{prefix}MIN_MS", _ms_to_ns),
        max_ns=_env(f"{prefix}MAX_MS", _ms_to_ns),
        factor=_env(f"{prefix}FACTOR", float),
        jitter=os.getenv(f"{prefix}JITTER", "0").strip().lower() in _TRUTHY,
        max_attempts=_env(f"{prefix}MAX_ATTEMPTS", int, 0),
    )
