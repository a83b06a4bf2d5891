"""Immutable view of the incoming HTTP request.

The gate never reads a request body, so only metadata is carried:
method, path, full URL, headers, cookies, and the client address.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from urllib.parse import urlsplit

from gatehouse._internal.asgi import Scope
from gatehouse.http.cookies import parse_cookies
from gatehouse.http.headers import Headers


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request handle.

    ``url`` is absolute (scheme, host, path, query) so redirects can be
    resolved against it. ``path`` is the decoded path used for matching.
    """

    method: str
    path: str
    url: str
    headers: Headers = field(default_factory=Headers)
    query_string: str = ""
    client: tuple[str, int] | None = None
    cookies: Mapping[str, str] = field(default_factory=dict)

    @property
    def origin(self) -> str:
        """``scheme://host[:port]`` of the request URL."""
        parts = urlsplit(self.url)
        return f"{parts.scheme}://{parts.netloc}"

    # -- Factories --

    @classmethod
    def build(
        cls,
        url: str,
        *,
        method: str = "GET",
        headers: Mapping[str, str] | None = None,
        client: tuple[str, int] | None = None,
    ) -> Request:
        """Create a request from an absolute URL.

        Handy for hosts that are not ASGI servers, and for tests::

            request = Request.build("https://example.com/admin?tab=1")
        """
        parts = urlsplit(url)
        hdrs = Headers.from_mapping(headers or {})
        return cls(
            method=method.upper(),
            path=parts.path or "/",
            url=url,
            headers=hdrs,
            query_string=parts.query,
            client=client,
            cookies=parse_cookies(hdrs.get("cookie", "")),
        )

    @classmethod
    def from_asgi(cls, scope: Scope) -> Request:
        """Create a request from an ASGI HTTP scope."""
        headers = Headers(tuple(scope.get("headers", ())))
        scheme = scope.get("scheme", "http")
        host = headers.get("host")
        if host is None:
            server = scope.get("server")
            host = f"{server[0]}:{server[1]}" if server else "localhost"
        path = scope["path"]
        query = scope.get("query_string", b"").decode("latin-1")
        url = f"{scheme}://{host}{path}"
        if query:
            url = f"{url}?{query}"
        client = scope.get("client")
        return cls(
            method=scope.get("method", "GET"),
            path=path,
            url=url,
            headers=headers,
            query_string=query,
            client=tuple(client) if client else None,
            cookies=parse_cookies(headers.get("cookie", "")),
        )
