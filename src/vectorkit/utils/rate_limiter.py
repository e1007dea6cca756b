import logging
import threading
import time
from collections import deque


logger = logging.getLogger(__name__)

class RateLimiter:
    """
    Thread-safe rate limiter with a sliding window.
    """

    def __init__(self, rpm: int, window: float = 60.0):
        self.rpm = rpm
        self.window = window
        self._timestamps: deque[float] = deque()
        self._lock = threading.Lock()

    def _evict(self, now: float) -> None:
        while self._timestamps and now - self._timestamps[0] >= self.window:
            self._timestamps.popleft()

    def _reserve(self) -> float:
        """Take a slot and return 0, or return how long to wait for one."""
        with self._lock:
            now = time.monotonic()
            self._evict(now)
            if len(self._timestamps) < self.rpm:
                self._timestamps.append(now)
                return 0.0
            return max(self.window - (now - self._timestamps[0]), 0.0)

    def acquire(self) -> None:
        """Block until a request slot is available."""
        if self.rpm <= 0:
            return

        # The lock is never held while sleeping.
        while True:
            wait_time = self._reserve()
            if wait_time <= 0:
                return
            logger.debug(f"Rate limit reached, waiting {wait_time:.2f}s")
            time.sleep(wait_time)

    @property
    def current_usage(self) -> int:
        """Current number of requests in the window."""
        with self._lock:
            self._evict(time.monotonic())
            return len(self._timestamps)
