"""SlidingWindowLimiter — per-key fixed-origin window admission control.

Pure logic, no I/O. Each key's window opens at its first request and
reopens once ``window_ms`` has fully elapsed; requests inside an open
window increment the count without moving the origin. A burst just
before a reset followed by one just after can exceed ``max_requests``
within ``window_ms`` of wall-clock time, so this bounds average load,
not peak throughput.
"""

from __future__ import annotations

import logging
import math
import threading
import time
from collections.abc import Callable

from weathernode.runtime.errors import AdmissionDeniedError
from weathernode.runtime.models import AdmissionDecision, RateLimitConfig, WindowEntry

logger = logging.getLogger(__name__)


def _monotonic_ms() -> float:
    return time.monotonic() * 1000


class SlidingWindowLimiter:
    """Admit or deny requests per client key.

    Usage::

        limiter = SlidingWindowLimiter(window_ms=60_000, max_requests=50)
        if not limiter.allow(client_ip):
            ...

    Timestamps are milliseconds from *clock* (monotonic by default); every
    check accepts an explicit ``now`` instead.
    """

    def __init__(
        self,
        window_ms: int,
        max_requests: int,
        *,
        clock: Callable[[], float] | None = None,
    ) -> None:
        self._config = RateLimitConfig(window_ms=window_ms, max_requests=max_requests)
        self._clock = clock or _monotonic_ms
        self._entries: dict[str, WindowEntry] = {}
        self._lock = threading.Lock()
        self._last_sweep: float | None = None

    @classmethod
    def from_config(
        cls, config: RateLimitConfig, *, clock: Callable[[], float] | None = None
    ) -> SlidingWindowLimiter:
        return cls(config.window_ms, config.max_requests, clock=clock)

    @property
    def config(self) -> RateLimitConfig:
        return self._config

    @property
    def window_ms(self) -> int:
        return self._config.window_ms

    @property
    def max_requests(self) -> int:
        return self._config.max_requests

    def __len__(self) -> int:
        return len(self._entries)

    def check(self, key: str, now: float | None = None) -> AdmissionDecision:
        """Record one request for *key* and return whether it is admitted."""
        if now is None:
            now = self._clock()

        with self._lock:
            self._sweep(now)
            entry = self._entries.get(key)

            if entry is None or self._expired(entry, now):
                self._entries[key] = WindowEntry(count=1, window_started_at=now)
                return AdmissionDecision(allowed=True, remaining=self.max_requests - 1)

            if entry.count >= self.max_requests:
                retry_after = math.ceil((entry.window_started_at + self.window_ms - now) / 1000)
                return AdmissionDecision(allowed=False, remaining=0, retry_after=retry_after)

            entry.count += 1
            return AdmissionDecision(allowed=True, remaining=self.max_requests - entry.count)

    def allow(self, key: str, now: float | None = None) -> bool:
        return self.check(key, now).allowed

    def admit(self, key: str, now: float | None = None) -> AdmissionDecision:
        """Like :meth:`check` but raise on denial.

        Raises:
            AdmissionDeniedError: *key* has used its budget for the current window.
        """
        decision = self.check(key, now)
        if not decision.allowed:
            logger.warning("Rate limit exceeded for %s, retry after %ds", key, decision.retry_after)
            raise AdmissionDeniedError(key, decision.retry_after, self._config.describe())
        return decision

    def entry(self, key: str) -> WindowEntry | None:
        """Snapshot of *key*'s window, or ``None`` when it has none."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            return WindowEntry(count=entry.count, window_started_at=entry.window_started_at)

    def reset(self) -> None:
        with self._lock:
            self._entries.clear()
            self._last_sweep = None

    def _expired(self, entry: WindowEntry, now: float) -> bool:
        return now - entry.window_started_at >= self.window_ms

    def _sweep(self, now: float) -> None:
        # At most one full pass per window; callers hold the lock.
        if self._last_sweep is not None and now - self._last_sweep < self.window_ms:
            return
        self._last_sweep = now
        stale = [key for key, entry in self._entries.items() if self._expired(entry, now)]
        for key in stale:
            del self._entries[key]
