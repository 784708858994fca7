import threading
import time
from collections import deque
from collections.abc import Callable

from fastapi import Request

from errors import RateLimited


def _drop_before(timestamps: deque, cutoff: float) -> None:
    while timestamps and timestamps[0] < cutoff:
        timestamps.popleft()


class SlidingWindowRateLimiter:
    """In-memory per-caller request counter over a sliding time window."""

    def __init__(
        self,
        max_requests: int = 100,
        window_seconds: float = 15 * 60,
        clock: Callable[[], float] = time.monotonic,
    ):
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self._clock = clock
        self._lock = threading.Lock()
        self._requests: dict[str, deque[float]] = {}
        self._last_sweep = clock()

    def allow(self, key: str) -> bool:
        now = self._clock()
        window_start = now - self.window_seconds
        with self._lock:
            if now - self._last_sweep >= self.window_seconds:
                self._sweep(window_start)
                self._last_sweep = now

            timestamps = self._requests.setdefault(key, deque())
            _drop_before(timestamps, window_start)

            if len(timestamps) >= self.max_requests:
                return False

            timestamps.append(now)
            return True

    def _sweep(self, window_start: float) -> None:
        # callers whose whole window has expired hold no state
        for key in list(self._requests):
            timestamps = self._requests[key]
            _drop_before(timestamps, window_start)
            if not timestamps:
                del self._requests[key]

    def tracked_keys(self) -> int:
        with self._lock:
            return len(self._requests)

    def reset(self) -> None:
        with self._lock:
            self._requests.clear()


def _client_address(request: Request) -> str:
    if request.client is None:
        return "unknown"
    return request.client.host or "unknown"


def enforce_rate_limit(request: Request) -> None:
    limiter: SlidingWindowRateLimiter = request.app.state.rate_limiter
    if not limiter.allow(_client_address(request)):
        raise RateLimited()
