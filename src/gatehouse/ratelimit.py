"""Sliding-window request counters for the ``rate_limit`` rule.

The store is an explicit collaborator rather than state captured in a
rule closure: share one instance between rules to share a budget, give
each its own for independent budgets, and inject a clock in tests.
"""

import math
import threading
import time
from collections.abc import Callable


class RateLimitStore:
    """In-memory sliding-window counters keyed by client identity.

    Usage::

        store = RateLimitStore()
        allowed, retry_after = store.hit("10.0.0.1", limit=5, window_seconds=60)
    """

    __slots__ = ("_clock", "_hits", "_lock")

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        # key -> timestamps of accepted requests, oldest first
        self._hits: dict[str, list[float]] = {}

    def hit(self, key: str, *, limit: int, window_seconds: float) -> tuple[bool, int]:
        """Record a request for *key* if the window has room.

        Returns ``(allowed, retry_after_seconds)``. Rejected requests are
        not recorded.
        """
        now = self._clock()
        window_start = now - window_seconds
        with self._lock:
            recent = [t for t in self._hits.get(key, ()) if t > window_start]
            if len(recent) >= limit:
                self._hits[key] = recent
                retry_after = max(1, math.ceil(recent[0] + window_seconds - now))
                return False, retry_after
            recent.append(now)
            self._hits[key] = recent
            return True, 0

    def reset(self, key: str | None = None) -> None:
        """Forget *key*, or every key when ``None``."""
        with self._lock:
            if key is None:
                self._hits.clear()
            else:
                self._hits.pop(key, None)

    def __len__(self) -> int:
        with self._lock:
            return len(self._hits)
