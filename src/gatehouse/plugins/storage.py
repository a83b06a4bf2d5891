"""Cache storage contract and the default in-memory implementation.

Any object with ``get``/``set``/``delete``/``clear`` satisfies
:class:`CacheStorage`; each method may be sync or async. A Redis or
memcached client wrapper plugs into :class:`CachingPlugin` the same way
the in-memory store does.
"""

import threading
import time
from collections.abc import Awaitable, Callable
from typing import Any, Protocol, runtime_checkable

# Lifetime used when ``set`` is called without a TTL
DEFAULT_TTL_MS = 3_600_000


@runtime_checkable
class CacheStorage(Protocol):
    """Key-value storage with optional per-entry TTL in milliseconds.

    No transactional guarantee: concurrent requests may read stale
    values until a write lands.
    """

    def get(self, key: str) -> Awaitable[Any] | Any: ...
    def set(self, key: str, value: Any, ttl_ms: int | None = None) -> Awaitable[None] | None: ...
    def delete(self, key: str) -> Awaitable[None] | None: ...
    def clear(self) -> Awaitable[None] | None: ...


class MemoryCacheStorage:
    """Process-local cache with lazy expiry.

    Expired entries are dropped when read. Suitable for development and
    single-instance deployments.
    """

    __slots__ = ("_clock", "_entries", "_lock")

    def __init__(self, clock: Callable[[], float] = time.monotonic) -> None:
        self._clock = clock
        self._lock = threading.Lock()
        # key -> (value, expires_at in clock seconds)
        self._entries: dict[str, tuple[Any, float]] = {}

    async def get(self, key: str) -> Any:
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, expires_at = entry
            if expires_at <= self._clock():
                del self._entries[key]
                return None
            return value

    async def set(self, key: str, value: Any, ttl_ms: int | None = None) -> None:
        ttl = ttl_ms if ttl_ms else DEFAULT_TTL_MS
        with self._lock:
            self._entries[key] = (value, self._clock() + ttl / 1000)

    async def delete(self, key: str) -> None:
        with self._lock:
            self._entries.pop(key, None)

    async def clear(self) -> None:
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)
