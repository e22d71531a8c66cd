from __future__ import annotations

import threading
import time


class RateLimiter:
    """Thread-safe request throttle shared by every outbound call.

    acquire() blocks until at least 1/qps seconds have passed since the slot
    handed to the previous caller, so parallel repository collections together
    stay under the configured rate.  A qps of zero or less disables throttling.
    """

    def __init__(self, qps: float) -> None:
        self._interval = 1.0 / qps if qps > 0 else 0.0
        self._lock = threading.Lock()
        self._next_slot = 0.0
        self.waits = 0

    def acquire(self) -> None:
        """Block until the next request may be sent."""
        if self._interval <= 0:
            return
        with self._lock:
            now = time.monotonic()
            if now < self._next_slot:
                self.waits += 1
                time.sleep(self._next_slot - now)
            self._next_slot = max(self._next_slot, time.monotonic()) + self._interval
