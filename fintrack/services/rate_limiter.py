"""
In-memory token-bucket rate limiter.

Keyed by an opaque string, conventionally "{user_id}:{action}".
Single-process only: buckets live in this process' memory and are not shared
between workers.

DESIGN NOTES:
- Buckets are created lazily with a full allowance (first call always admitted)
- Fractional tokens are kept across refills
- Denial is a value (RateLimitDecision), never an exception
- The bucket map is bounded (LRU) and can be swept of idle buckets
"""

from collections import OrderedDict
from dataclasses import dataclass
from typing import Callable, Optional
import logging
import math
import threading
import time

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000.0


@dataclass(frozen=True)
class RateLimitOptions:
    """Bucket shape: max tokens and tokens added per millisecond."""
    capacity: float
    refill_per_ms: float


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of one admission check."""
    allowed: bool
    retry_after_ms: int = 0

    @property
    def retry_after_seconds(self) -> int:
        return math.ceil(self.retry_after_ms / 1000)


@dataclass
class RateBucket:
    tokens: float
    last_refill_ms: float


def per_minute(n: int) -> RateLimitOptions:
    """Preset for "n requests per minute" (capacity n, refilled over 60s)."""
    return RateLimitOptions(capacity=n, refill_per_ms=n / 60000)


class RateLimiter:
    """
    Token-bucket limiter with a bounded bucket map.

    Endpoints that call it run in FastAPI's threadpool, so the
    read-modify-write on a bucket is done under a lock.
    """

    def __init__(
        self,
        max_buckets: int = 10000,
        clock: Optional[Callable[[], float]] = None,
    ):
        if max_buckets < 1:
            raise ValueError("max_buckets must be at least 1")
        self.max_buckets = max_buckets
        self._clock = clock or _monotonic_ms
        self._buckets: "OrderedDict[str, RateBucket]" = OrderedDict()
        self._lock = threading.Lock()
        self._last_sweep_ms = self._clock()

    def consume(self, key: str, options: RateLimitOptions) -> RateLimitDecision:
        """
        Consume one token from the bucket for key.

        Args:
            key: Bucket key (e.g. "user-123:tx.suggestCategory")
            options: Bucket capacity and refill rate

        Returns:
            RateLimitDecision: allowed, or denied with the wait in ms until
            one token is available
        """
        with self._lock:
            now = self._clock()
            bucket = self._buckets.get(key)
            if bucket is None:
                bucket = RateBucket(tokens=options.capacity, last_refill_ms=now)
                self._buckets[key] = bucket
                self._evict_overflow()
            else:
                self._buckets.move_to_end(key)

            # Refill
            elapsed = now - bucket.last_refill_ms
            if elapsed > 0:
                bucket.tokens = min(options.capacity, bucket.tokens + elapsed * options.refill_per_ms)
                bucket.last_refill_ms = now

            if bucket.tokens >= 1:
                bucket.tokens -= 1
                return RateLimitDecision(allowed=True)

            deficit = 1 - bucket.tokens
            retry_after_ms = math.ceil(deficit / options.refill_per_ms)
            return RateLimitDecision(allowed=False, retry_after_ms=retry_after_ms)

    def tokens(self, key: str) -> Optional[float]:
        """Current token count for key (None if no bucket yet). No refill applied."""
        with self._lock:
            bucket = self._buckets.get(key)
            return bucket.tokens if bucket else None

    def sweep(self, idle_ms: float) -> int:
        """
        Remove buckets untouched for longer than idle_ms.

        Returns:
            Number of buckets removed
        """
        with self._lock:
            cutoff = self._clock() - idle_ms
            stale = [k for k, b in self._buckets.items() if b.last_refill_ms < cutoff]
            for k in stale:
                del self._buckets[k]
        if stale:
            logger.debug(f"Rate limiter swept {len(stale)} idle bucket(s)")
        return len(stale)

    def maybe_sweep(self, idle_ms: float) -> int:
        """
        Sweep at most once per idle window.

        Called on the request path, so the map is pruned without a
        background task.
        """
        now = self._clock()
        with self._lock:
            if now - self._last_sweep_ms < idle_ms:
                return 0
            self._last_sweep_ms = now
        return self.sweep(idle_ms)

    def reset(self, key: Optional[str] = None) -> None:
        """Drop one bucket, or all of them."""
        with self._lock:
            if key is None:
                self._buckets.clear()
            else:
                self._buckets.pop(key, None)

    def __len__(self) -> int:
        return len(self._buckets)

    def _evict_overflow(self) -> None:
        # Caller holds the lock.
        while len(self._buckets) > self.max_buckets:
            evicted, _ = self._buckets.popitem(last=False)
            logger.debug(f"Rate limiter evicted least-recently-used bucket: {evicted}")
