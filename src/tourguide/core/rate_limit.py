"""
Simple in-process rate limiting utilities.

The HTTP adapters are called from worker pools, so the limiter is shared across
threads and guards its bucket with a lock.
"""

from __future__ import annotations

import threading
import time
from dataclasses import dataclass, field


@dataclass
class TokenBucketRateLimiter:
    """Token bucket limiter for N events per minute (best-effort)."""

    max_per_minute: float
    burst: float | None = None
    _lock: threading.Lock = field(default_factory=threading.Lock, init=False, repr=False)

    def __post_init__(self) -> None:
        rpm = float(self.max_per_minute)
        if rpm <= 0:
            raise ValueError("max_per_minute must be > 0")
        self._capacity = float(self.burst) if self.burst is not None else float(rpm)
        self._tokens = self._capacity
        self._refill_per_sec = rpm / 60.0
        self._last = time.monotonic()

    def _refill(self) -> None:
        now = time.monotonic()
        elapsed = now - self._last
        if elapsed <= 0:
            return
        self._tokens = min(self._capacity, self._tokens + elapsed * self._refill_per_sec)
        self._last = now

    def try_acquire(self, tokens: float = 1.0) -> float:
        """Take tokens if available; otherwise return how long to wait before retrying."""
        need = float(tokens)
        with self._lock:
            self._refill()
            if self._tokens >= need:
                self._tokens -= need
                return 0.0
            missing = need - self._tokens
        return max(0.05, missing / max(1e-6, self._refill_per_sec))

    def acquire(self, tokens: float = 1.0) -> None:
        if float(tokens) <= 0:
            return
        while True:
            wait_s = self.try_acquire(tokens)
            if wait_s <= 0:
                return
            # Sleep outside the lock so other workers can refill/acquire meanwhile.
            time.sleep(min(1.0, wait_s))
