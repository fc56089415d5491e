"""Tests for the token-bucket rate limiter."""

import threading

from fintrack.services.rate_limiter import (
    RateLimitDecision,
    RateLimiter,
    RateLimitOptions,
    per_minute,
)
from tests.fakes import FakeClock

TWO_PER_2MS = RateLimitOptions(capacity=2, refill_per_ms=0.5)


def make_limiter(**kwargs):
    clock = FakeClock()
    return RateLimiter(clock=clock, **kwargs), clock


def test_per_minute_preset():
    options = per_minute(6)
    assert options.capacity == 6
    assert options.refill_per_ms == 6 / 60000


def test_first_calls_admitted_then_denied_with_retry():
    limiter, _ = make_limiter()
    assert limiter.consume("u:a", TWO_PER_2MS).allowed
    assert limiter.consume("u:a", TWO_PER_2MS).allowed

    denied = limiter.consume("u:a", TWO_PER_2MS)
    assert denied == RateLimitDecision(allowed=False, retry_after_ms=2)


def test_fractional_refill_and_retry_after():
    limiter, clock = make_limiter()
    options = RateLimitOptions(capacity=1, refill_per_ms=0.25)
    assert limiter.consume("k", options).allowed

    clock.advance(2)  # 0.5 tokens
    decision = limiter.consume("k", options)
    assert not decision.allowed
    assert decision.retry_after_ms == 2

    clock.advance(2)
    assert limiter.consume("k", options).allowed


def test_refill_is_capped_at_capacity():
    limiter, clock = make_limiter()
    limiter.consume("k", TWO_PER_2MS)
    clock.advance(1_000_000)
    limiter.consume("k", TWO_PER_2MS)
    assert limiter.tokens("k") == 1


def test_keys_are_independent():
    limiter, _ = make_limiter()
    options = RateLimitOptions(capacity=1, refill_per_ms=0.001)
    assert limiter.consume("alice:x", options).allowed
    assert not limiter.consume("alice:x", options).allowed
    assert limiter.consume("bob:x", options).allowed


def test_retry_after_seconds_rounds_up():
    assert RateLimitDecision(allowed=False, retry_after_ms=1500).retry_after_seconds == 2
    assert RateLimitDecision(allowed=False, retry_after_ms=1000).retry_after_seconds == 1


def test_bucket_map_is_lru_bounded():
    limiter, _ = make_limiter(max_buckets=2)
    limiter.consume("a", TWO_PER_2MS)
    limiter.consume("b", TWO_PER_2MS)
    limiter.consume("a", TWO_PER_2MS)  # touch a, b is now oldest
    limiter.consume("c", TWO_PER_2MS)

    assert len(limiter) == 2
    assert limiter.tokens("b") is None
    assert limiter.tokens("a") == 0


def test_sweep_removes_idle_buckets():
    limiter, clock = make_limiter()
    limiter.consume("old", TWO_PER_2MS)
    clock.advance(100)
    limiter.consume("new", TWO_PER_2MS)

    assert limiter.sweep(idle_ms=50) == 1
    assert limiter.tokens("old") is None
    assert limiter.tokens("new") == 1


def test_maybe_sweep_runs_once_per_window():
    limiter, clock = make_limiter()
    clock.advance(10)
    limiter.consume("k", TWO_PER_2MS)
    assert limiter.maybe_sweep(1000) == 0

    clock.advance(2000)
    assert limiter.maybe_sweep(1000) == 1
    assert len(limiter) == 0


def test_reset():
    limiter, _ = make_limiter()
    limiter.consume("a", TWO_PER_2MS)
    limiter.consume("b", TWO_PER_2MS)
    limiter.reset("a")
    assert limiter.tokens("a") is None
    limiter.reset()
    assert len(limiter) == 0


def test_concurrent_consumers_never_exceed_capacity():
    limiter, _ = make_limiter()  # clock frozen, no refill
    options = RateLimitOptions(capacity=10, refill_per_ms=0.001)
    results = []
    lock = threading.Lock()

    def worker():
        decision = limiter.consume("shared", options)
        with lock:
            results.append(decision.allowed)

    threads = [threading.Thread(target=worker) for _ in range(50)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count(True) == 10
