"""Shared call pacing for third-party providers."""

import threading
import time
from typing import Callable

from stockdash.core.logger import logger


class RateLimiter:
    """Token bucket that paces calls to stay under a provider's quota.

    With the default ``capacity=1`` this degenerates to a minimum interval
    between consecutive calls: the first call goes straight through, every
    later call waits until ``interval`` seconds have passed since the
    previous one. One instance is shared by every caller that hits the same
    provider.

    Args:
        interval: Seconds needed to refill one token.
        capacity: Maximum burst size.
        clock: Monotonic time source (injectable for tests).
        sleep: Sleep function (injectable for tests).
    """

    def __init__(
        self,
        interval: float,
        capacity: int = 1,
        clock: Callable[[], float] = time.monotonic,
        sleep: Callable[[float], None] = time.sleep,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be >= 0")
        if capacity < 1:
            raise ValueError("capacity must be >= 1")
        self.interval = interval
        self.capacity = capacity
        self._clock = clock
        self._sleep = sleep
        self._tokens = float(capacity)
        self._updated = clock()
        self._lock = threading.Lock()

    def _refill(self, now: float) -> None:
        if self.interval == 0:
            self._tokens = float(self.capacity)
        else:
            elapsed = now - self._updated
            self._tokens = min(float(self.capacity), self._tokens + elapsed / self.interval)
        self._updated = now

    def acquire(self) -> float:
        """Block until a call is allowed.

        Returns:
            float: Seconds spent waiting.
        """
        with self._lock:
            now = self._clock()
            self._refill(now)
            waited = 0.0
            if self._tokens < 1.0:
                waited = (1.0 - self._tokens) * self.interval
                logger.debug(f"RateLimiter: waiting {waited:.2f}s")
                self._sleep(waited)
                self._refill(self._clock())
                # A sleep that returns early (or a fake clock) must not leave a negative balance.
                self._tokens = max(self._tokens, 1.0)
            self._tokens -= 1.0
            return waited
