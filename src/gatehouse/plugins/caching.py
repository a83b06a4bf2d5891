"""Caching plugin — reuse fetched user data across requests.

On ``before_request`` a cache hit fills ``context.data`` (so the builder
skips the user fetch) and sets ``context.metadata["cached"]``. On
``after_request`` freshly fetched data is stored, unless the request
ended in a redirect.

Entries are keyed by the caller's credentials as well as the URL, so one
client is never served another's data. Requests carrying no credentials
are not cached at all. A custom ``key`` may return ``None`` to opt a
request out.

Usage::

    from gatehouse.plugins import CachingConfig, CachingPlugin

    builder.use(CachingPlugin(CachingConfig(ttl_ms=60_000)))
"""

from __future__ import annotations

import hashlib
from collections.abc import Callable
from dataclasses import dataclass

from gatehouse._internal.invoke import invoke
from gatehouse.context import RequestContext
from gatehouse.http.request import Request
from gatehouse.http.response import AnyResponse, Redirect
from gatehouse.plugins.protocol import Plugin
from gatehouse.plugins.storage import CacheStorage, MemoryCacheStorage


def default_cache_key(request: Request) -> str | None:
    """``gatehouse:<credential digest>:<full url>``, or ``None`` when anonymous.

    Credentials are the ``Authorization`` and ``Cookie`` headers.
    """
    authorization = request.headers.get("authorization", "")
    cookie = request.headers.get("cookie", "")
    if not authorization and not cookie:
        return None
    digest = hashlib.sha256(f"{authorization}\n{cookie}".encode()).hexdigest()
    return f"gatehouse:{digest}:{request.url}"


@dataclass(frozen=True, slots=True)
class CachingConfig:
    """Caching plugin configuration.

    Attributes:
        enabled: Turn the plugin into a no-op when ``False``.
        ttl_ms: Lifetime of stored entries in milliseconds.
        key: Derives the cache key from the request; ``None`` skips caching.
    """

    enabled: bool = True
    ttl_ms: int = 300_000
    key: Callable[[Request], str | None] = default_cache_key


class CachingPlugin(Plugin):
    """Serve user data from a :class:`CacheStorage`."""

    name = "caching"

    __slots__ = ("_config", "_storage")

    def __init__(
        self,
        config: CachingConfig | None = None,
        storage: CacheStorage | None = None,
    ) -> None:
        self._config = config or CachingConfig()
        self._storage = storage if storage is not None else MemoryCacheStorage()

    @property
    def storage(self) -> CacheStorage:
        return self._storage

    async def before_request(self, context: RequestContext) -> None:
        if not self._config.enabled:
            return
        key = self._config.key(context.request)
        if key is None:
            return
        cached = await invoke(self._storage.get, key)
        if cached:
            context.metadata["cached"] = True
            context.data = cached

    async def after_request(self, context: RequestContext, result: AnyResponse) -> None:
        if not self._config.enabled or context.metadata.get("cached"):
            return
        if not context.data or isinstance(result, Redirect):
            return
        key = self._config.key(context.request)
        if key is not None:
            await invoke(
                self._storage.set,
                key,
                context.data,
                self._config.ttl_ms,
            )
