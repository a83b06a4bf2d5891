"""ASGI adapter — put a policy handler in front of any ASGI application.

Usage::

    from gatehouse.asgi import PolicyMiddleware

    handler = PolicyBuilder(config).prefix("/admin", rules.is_logged_in()).build()
    app = PolicyMiddleware(app, handler)

Pass-through decisions (and a legacy ``None``) forward the request to
the wrapped app, with any pass-through headers merged into its response
start message. Every other decision is answered directly.
"""

import logging
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any

from gatehouse._internal.asgi import ASGIApp, Receive, Scope, Send
from gatehouse.http.request import Request
from gatehouse.http.response import AnyResponse, PassThrough, Redirect, Response

logger = logging.getLogger("gatehouse.asgi")

type PolicyCallable = Callable[[Request], Awaitable[AnyResponse | None]]


def _encode_headers(headers: tuple[tuple[str, str], ...]) -> list[tuple[bytes, bytes]]:
    return [(name.lower().encode("latin-1"), value.encode("latin-1")) for name, value in headers]


def _body_allowed(status: int) -> bool:
    # 1xx, 204, and 304 responses do not include a message body.
    return not (100 <= status < 200 or status in {204, 304})


async def send_response(response: Response | Redirect, send: Send) -> None:
    """Translate a terminal gate decision into ASGI ``send()`` calls."""
    if isinstance(response, Redirect):
        raw_headers = [(b"location", response.url.encode("latin-1"))]
        body = b""
    else:
        raw_headers = [(b"content-type", response.content_type.encode("latin-1"))]
        body = response.body_bytes if _body_allowed(response.status) else b""
    raw_headers.extend(_encode_headers(response.headers))
    raw_headers.append((b"content-length", str(len(body)).encode("latin-1")))

    await send(
        {
            "type": "http.response.start",
            "status": response.status,
            "headers": raw_headers,
        }
    )
    await send({"type": "http.response.body", "body": body})


class PolicyMiddleware:
    """ASGI middleware running a policy handler before the wrapped app.

    Non-HTTP scopes (lifespan, websocket) go straight to the app.
    """

    __slots__ = ("app", "handler")

    def __init__(self, app: ASGIApp, handler: PolicyCallable) -> None:
        self.app = app
        self.handler = handler

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        request = Request.from_asgi(scope)
        result = await self.handler(request)

        if result is None:
            logger.debug("No decision for %s; forwarding", request.path)
            await self.app(scope, receive, send)
            return

        if isinstance(result, PassThrough):
            await self.app(scope, receive, self._merging_send(send, result))
            return

        await send_response(result, send)

    def _merging_send(self, send: Send, decision: PassThrough) -> Send:
        if not decision.headers:
            return send
        extra = _encode_headers(decision.headers)

        async def wrapped(message: MutableMapping[str, Any]) -> None:
            if message["type"] == "http.response.start":
                message = {**message, "headers": [*message.get("headers", ()), *extra]}
            await send(message)

        return wrapped
