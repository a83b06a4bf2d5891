"""ASGI type aliases used by the adapter and the request factory."""

from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any, TypeAlias

Scope: TypeAlias = MutableMapping[str, Any]
Receive: TypeAlias = Callable[[], Awaitable[MutableMapping[str, Any]]]
Send: TypeAlias = Callable[[MutableMapping[str, Any]], Awaitable[None]]

# A downstream ASGI application
ASGIApp: TypeAlias = Callable[[Scope, Receive, Send], Awaitable[None]]
