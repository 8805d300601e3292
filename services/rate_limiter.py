"""
Fixed-interval rate limiting for outbound Webflow calls.

Webflow enforces a per-token request ceiling. Each import run spaces its
calls with a limiter: the first call goes out immediately, every later call
waits until at least `interval_seconds` have passed since the previous one.
The interval never adapts and never grows after failures.
"""

import time
from typing import Callable, Optional


class FixedIntervalRateLimiter:
    """
    Minimum spacing between consecutive calls.

    Clock and sleep are injectable so tests can run without real delays.
    Not thread-safe; one limiter belongs to one sequential loop.
    """

    def __init__(
        self,
        interval_seconds: float,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ):
        if interval_seconds < 0:
            raise ValueError("interval_seconds must be >= 0")
        self.interval_seconds = interval_seconds
        self._clock = clock
        self._sleep = sleep
        self._last_call: Optional[float] = None

    def wait(self) -> float:
        """
        Block until the next call may go out, then mark it as sent.

        Returns:
            Seconds slept (0.0 when no wait was needed)
        """
        now = self._clock()
        waited = 0.0

        if self._last_call is not None:
            remaining = self.interval_seconds - (now - self._last_call)
            if remaining > 0:
                self._sleep(remaining)
                waited = remaining
                now = self._clock()

        self._last_call = now
        return waited

    def reset(self) -> None:
        """Forget the previous call so the next one goes out immediately."""
        self._last_call = None
