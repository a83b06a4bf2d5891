"""Tests for MemoryCacheStorage and CachingPlugin."""

import pytest

from gatehouse import rules
from gatehouse.builder import PolicyBuilder
from gatehouse.http.request import Request
from gatehouse.http.response import PassThrough, Redirect
from gatehouse.plugins.caching import CachingConfig, CachingPlugin, default_cache_key
from gatehouse.plugins.storage import CacheStorage, MemoryCacheStorage
from gatehouse.responses import redirect


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now


class CountingFetcher:
    def __init__(self, value) -> None:
        self.value = value
        self.calls = 0

    async def __call__(self, request):
        self.calls += 1
        return self.value


class DictStorage:
    """Synchronous storage, as a thin client wrapper might be."""

    def __init__(self) -> None:
        self.entries: dict = {}
        self.ttls: dict = {}

    def get(self, key):
        return self.entries.get(key)

    def set(self, key, value, ttl_ms=None):
        self.entries[key] = value
        self.ttls[key] = ttl_ms

    def delete(self, key):
        self.entries.pop(key, None)

    def clear(self):
        self.entries.clear()


def _request(path: str, session: str | None = "s1") -> Request:
    headers = {"Cookie": f"session={session}"} if session else None
    return Request.build(f"http://testserver{path}", headers=headers)


class TestMemoryCacheStorage:
    @pytest.mark.anyio
    async def test_set_get_delete(self) -> None:
        storage = MemoryCacheStorage()
        await storage.set("k", {"id": 1})
        assert await storage.get("k") == {"id": 1}

        await storage.delete("k")
        assert await storage.get("k") is None

    @pytest.mark.anyio
    async def test_entries_expire(self) -> None:
        clock = FakeClock()
        storage = MemoryCacheStorage(clock=clock)
        await storage.set("k", "v", ttl_ms=1_000)

        clock.now = 0.5
        assert await storage.get("k") == "v"
        clock.now = 1.0
        assert await storage.get("k") is None
        assert len(storage) == 0

    @pytest.mark.anyio
    async def test_default_ttl(self) -> None:
        clock = FakeClock()
        storage = MemoryCacheStorage(clock=clock)
        await storage.set("k", "v")

        clock.now = 3_599.0
        assert await storage.get("k") == "v"
        clock.now = 3_600.0
        assert await storage.get("k") is None

    @pytest.mark.anyio
    async def test_clear(self) -> None:
        storage = MemoryCacheStorage()
        await storage.set("a", 1)
        await storage.set("b", 2)
        await storage.clear()
        assert len(storage) == 0

    def test_satisfies_protocol(self) -> None:
        assert isinstance(MemoryCacheStorage(), CacheStorage)
        assert isinstance(DictStorage(), CacheStorage)


class TestCachingPlugin:
    def test_default_key_includes_url_and_credentials(self) -> None:
        key = default_cache_key(_request("/a?x=1"))
        assert key is not None
        assert key.startswith("gatehouse:")
        assert key.endswith(":http://testserver/a?x=1")
        assert key != default_cache_key(_request("/a?x=1", session="s2"))

    def test_default_key_authorization_header(self) -> None:
        a = Request.build("http://testserver/a", headers={"Authorization": "Bearer one"})
        b = Request.build("http://testserver/a", headers={"Authorization": "Bearer two"})
        assert default_cache_key(a) != default_cache_key(b)

    def test_default_key_anonymous(self) -> None:
        assert default_cache_key(_request("/a", session=None)) is None

    @pytest.mark.anyio
    async def test_second_request_served_from_cache(self) -> None:
        fetch = CountingFetcher({"id": "u1"})
        seen: list = []
        handler = (
            PolicyBuilder(fetch_user=fetch)
            .use(CachingPlugin())
            .exact("/a", lambda ctx: seen.append(ctx.metadata.get("cached", False)))
            .build()
        )

        await handler(_request("/a"))
        await handler(_request("/a"))

        assert fetch.calls == 1
        assert seen == [False, True]

    @pytest.mark.anyio
    async def test_redirect_results_are_not_cached(self) -> None:
        fetch = CountingFetcher({"id": "u1"})
        storage = DictStorage()
        handler = (
            PolicyBuilder(fetch_user=fetch)
            .use(CachingPlugin(storage=storage))
            .exact("/a", lambda ctx: redirect("/b", ctx.request.url))
            .build()
        )

        await handler(_request("/a"))
        await handler(_request("/a"))

        assert storage.entries == {}
        assert fetch.calls == 2

    @pytest.mark.anyio
    async def test_sync_storage_and_ttl(self) -> None:
        storage = DictStorage()
        handler = (
            PolicyBuilder(fetch_user=CountingFetcher({"id": "u1"}))
            .use(CachingPlugin(CachingConfig(ttl_ms=60_000), storage))
            .exact("/a")
            .build()
        )
        await handler(_request("/a"))

        key = default_cache_key(_request("/a"))
        assert storage.entries == {key: {"id": "u1"}}
        assert storage.ttls == {key: 60_000}

    @pytest.mark.anyio
    async def test_custom_key(self) -> None:
        storage = DictStorage()
        config = CachingConfig(key=lambda request: f"user:{request.headers.get('x-session')}")
        handler = (
            PolicyBuilder(fetch_user=CountingFetcher({"id": "u1"}))
            .use(CachingPlugin(config, storage))
            .exact("/a")
            .build()
        )
        await handler(Request.build("http://testserver/a", headers={"X-Session": "s1"}))
        assert list(storage.entries) == ["user:s1"]

    @pytest.mark.anyio
    async def test_disabled(self) -> None:
        fetch = CountingFetcher({"id": "u1"})
        storage = DictStorage()
        handler = (
            PolicyBuilder(fetch_user=fetch)
            .use(CachingPlugin(CachingConfig(enabled=False), storage))
            .exact("/a")
            .build()
        )
        await handler(_request("/a"))
        await handler(_request("/a"))

        assert fetch.calls == 2
        assert storage.entries == {}

    @pytest.mark.anyio
    async def test_unmatched_requests_store_nothing(self) -> None:
        storage = DictStorage()
        handler = (
            PolicyBuilder(fetch_user=CountingFetcher({"id": "u1"}))
            .use(CachingPlugin(storage=storage))
            .build()
        )
        await handler(_request("/elsewhere"))
        assert storage.entries == {}

    @pytest.mark.anyio
    async def test_clients_do_not_share_entries(self) -> None:
        users = {"session=admin": {"id": "a1", "role": "admin"}, "session=guest": None}

        async def fetch(request):
            return users[request.headers.get("cookie")]

        storage = DictStorage()
        handler = (
            PolicyBuilder(fetch_user=fetch)
            .use(CachingPlugin(storage=storage))
            .exact("/admin", rules.has_role("admin"))
            .build()
        )

        admin = await handler(_request("/admin", session="admin"))
        guest = await handler(_request("/admin", session="guest"))

        assert isinstance(admin, PassThrough)
        assert isinstance(guest, Redirect)
        assert guest.url == "http://testserver/sign-in"
        assert list(storage.entries.values()) == [{"id": "a1", "role": "admin"}]

    @pytest.mark.anyio
    async def test_anonymous_requests_are_not_cached(self) -> None:
        fetch = CountingFetcher({"id": "u1"})
        storage = DictStorage()
        handler = (
            PolicyBuilder(fetch_user=fetch)
            .use(CachingPlugin(storage=storage))
            .exact("/a")
            .build()
        )
        await handler(_request("/a", session=None))
        await handler(_request("/a", session=None))

        assert fetch.calls == 2
        assert storage.entries == {}
