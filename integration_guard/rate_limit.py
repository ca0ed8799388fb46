"""
Caller-identity rate limiting for the HTTP surface
"""
import logging
import math
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Callable, Dict, Optional

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one rate-limit check"""
    allowed: bool
    limit: int
    remaining: int
    retry_after: int = 0  # seconds until the window resets, when rejected


class RateLimiter(ABC):
    """Fixed-quota limiter keyed by caller identity"""

    @abstractmethod
    def hit(self, key: str) -> RateLimitDecision:
        """Count one request for key and decide whether it may proceed"""
        pass

    @abstractmethod
    def reset(self, key: Optional[str] = None) -> None:
        """Forget the window of one key, or of every key"""
        pass


class _KeyWindow:
    __slots__ = ("lock", "count", "reset_at")

    def __init__(self):
        self.lock = threading.Lock()
        self.count = 0
        self.reset_at = 0.0


class InMemoryRateLimiter(RateLimiter):
    """Fixed-window limiter for single-instance deployments.

    Each key has its own lock, so requests for different identities never
    contend and the read-check-increment for one identity is atomic. Windows
    reset lazily on the next access; there is no background sweeper, so
    bursts straddling a window boundary may briefly see up to twice the quota.
    Expired windows are evicted when a new key arrives, at most once per window.
    """

    def __init__(self, limit: int = 20, window_seconds: float = 60.0,
                 clock: Callable[[], float] = time.time):
        if limit <= 0 or window_seconds <= 0:
            raise ValueError("limit and window_seconds must be positive")
        self.limit = limit
        self.window_seconds = window_seconds
        self.clock = clock
        self._windows: Dict[str, _KeyWindow] = {}
        self._guard = threading.Lock()  # protects creation and eviction of per-key windows
        self._next_sweep = 0.0

    def _window_for(self, key: str) -> _KeyWindow:
        if (window := self._windows.get(key)) is not None:
            return window
        with self._guard:
            if key not in self._windows:
                self._evict_expired()
            return self._windows.setdefault(key, _KeyWindow())

    def _evict_expired(self) -> None:
        """Drop windows that have run out; caller holds the guard"""
        now = self.clock()
        if now < self._next_sweep:
            return
        self._next_sweep = now + self.window_seconds

        for key, window in list(self._windows.items()):
            # Windows in use are left for the next sweep
            if not window.lock.acquire(blocking=False):
                continue
            try:
                if now >= window.reset_at:
                    del self._windows[key]
            finally:
                window.lock.release()

    def hit(self, key: str) -> RateLimitDecision:
        while True:
            window = self._window_for(key)
            with window.lock:
                # Evicted between lookup and lock; retry on the live window
                if self._windows.get(key) is window:
                    return self._count(key, window)

    def _count(self, key: str, window: _KeyWindow) -> RateLimitDecision:
        """Read-check-increment of one window; caller holds its lock"""
        now = self.clock()
        if now >= window.reset_at:
            window.count = 0
            window.reset_at = now + self.window_seconds

        if window.count >= self.limit:
            retry_after = max(1, math.ceil(window.reset_at - now))
            logger.warning(f"Rate limit exceeded for {key}, retry after {retry_after}s")
            return RateLimitDecision(False, self.limit, 0, retry_after)

        window.count += 1
        return RateLimitDecision(True, self.limit, self.limit - window.count)

    def reset(self, key: Optional[str] = None) -> None:
        with self._guard:
            if key is None:
                self._windows.clear()
            else:
                self._windows.pop(key, None)
