"""Request rate limiting."""

from collections.abc import Callable
from dataclasses import dataclass, field
from datetime import UTC, datetime, timedelta
from typing import Protocol


@dataclass(frozen=True)
class RateLimitDecision:
    """Outcome of counting one request against a quota."""

    allowed: bool
    limit: int
    remaining: int
    reset_at: datetime


class RateLimiter(Protocol):
    """Counts requests per client key within a fixed window."""

    def hit(self, key: str, limit: int) -> RateLimitDecision:
        """Count a request for ``key`` and report whether it is allowed."""


@dataclass
class _Window:
    count: int
    started_at: datetime


def _utcnow() -> datetime:
    return datetime.now(tz=UTC)


@dataclass
class InMemoryRateLimiter(RateLimiter):
    """Fixed-window limiter kept in process memory.

    Counters are per process and reset on restart, so each instance of a
    scaled-out deployment enforces its own quota. At most ``max_keys``
    windows are kept; when full, expired windows go first, then the oldest.
    """

    window_seconds: int = 15 * 60
    max_keys: int = 10_000
    now: Callable[[], datetime] = _utcnow
    _windows: dict[str, _Window] = field(default_factory=dict, repr=False)

    def hit(self, key: str, limit: int) -> RateLimitDecision:
        """Count a request, starting a fresh window when the old one expired."""
        current = self.now()
        window = self._windows.get(key)
        if window is None or current - window.started_at > self._window:
            if window is None and len(self._windows) >= self.max_keys:
                self._make_room()
            window = _Window(count=0, started_at=current)
            self._windows[key] = window
        reset_at = window.started_at + self._window
        if window.count >= limit:
            return RateLimitDecision(
                allowed=False, limit=limit, remaining=0, reset_at=reset_at
            )
        window.count += 1
        return RateLimitDecision(
            allowed=True,
            limit=limit,
            remaining=limit - window.count,
            reset_at=reset_at,
        )

    def prune(self) -> None:
        """Drop windows that have already expired."""
        current = self.now()
        expired = [
            key
            for key, window in self._windows.items()
            if current - window.started_at > self._window
        ]
        for key in expired:
            self._windows.pop(key, None)

    def _make_room(self) -> None:
        self.prune()
        while self._windows and len(self._windows) >= self.max_keys:
            oldest = min(self._windows, key=lambda k: self._windows[k].started_at)
            del self._windows[oldest]

    @property
    def _window(self) -> timedelta:
        return timedelta(seconds=self.window_seconds)
