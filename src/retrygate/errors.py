from __future__ import annotations


class RetryGateError(Exception):
    """Base class for everything this package raises."""


class BackoffConfigError(RetryGateError, ValueError):
    """Backoff configuration is out of range or could not be parsed."""


class MaxAttemptsExceeded(RetryGateError):
    """
    Raised by Backoff.duration() once the attempt cap is reached.
    Carries no delay; the attempt index is left where it was.
    """
    def __init__(self, attempt: int, max_attempts: int):
        self.attempt = attempt
        self.max_attempts = max_attempts
        super().__init__(f"max attempts exceeded ({attempt} of {max_attempts})")
