"""Tests for the in-memory rate limiter."""

from datetime import UTC, datetime, timedelta

from marble_catalog.services.rate_limit import InMemoryRateLimiter


class _Clock:
    def __init__(self) -> None:
        self.current = datetime(2024, 6, 1, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.current


def test_rate_limiter_blocks_after_limit() -> None:
    clock = _Clock()
    limiter = InMemoryRateLimiter(window_seconds=60, now=clock)

    decisions = [limiter.hit("1.2.3.4", limit=3) for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert [d.remaining for d in decisions] == [2, 1, 0, 0]
    assert decisions[-1].reset_at == clock.current + timedelta(seconds=60)


def test_rate_limiter_resets_after_window() -> None:
    clock = _Clock()
    limiter = InMemoryRateLimiter(window_seconds=60, now=clock)
    limiter.hit("client", limit=1)
    assert not limiter.hit("client", limit=1).allowed

    clock.current += timedelta(seconds=61)

    assert limiter.hit("client", limit=1).allowed


def test_rate_limiter_tracks_keys_independently() -> None:
    limiter = InMemoryRateLimiter(window_seconds=60, now=_Clock())
    limiter.hit("a", limit=1)

    assert not limiter.hit("a", limit=1).allowed
    assert limiter.hit("b", limit=1).allowed


def test_rate_limiter_prunes_expired_windows_when_full() -> None:
    clock = _Clock()
    limiter = InMemoryRateLimiter(window_seconds=60, max_keys=2, now=clock)
    limiter.hit("a", limit=5)
    limiter.hit("b", limit=5)
    clock.current += timedelta(seconds=120)

    limiter.hit("c", limit=5)

    assert set(limiter._windows) == {"c"}


def test_rate_limiter_evicts_oldest_live_window_when_full() -> None:
    clock = _Clock()
    limiter = InMemoryRateLimiter(window_seconds=60, max_keys=2, now=clock)
    limiter.hit("a", limit=5)
    clock.current += timedelta(seconds=1)
    limiter.hit("b", limit=5)
    clock.current += timedelta(seconds=1)

    for index in range(10):
        limiter.hit(f"rotated-{index}", limit=5)

    assert len(limiter._windows) == 2
    assert "a" not in limiter._windows
