"""Shared type aliases used across gatehouse modules."""

from collections.abc import Awaitable, Callable
from typing import TYPE_CHECKING, Any, TypeAlias

if TYPE_CHECKING:
    from gatehouse.context import RequestContext
    from gatehouse.http.request import Request
    from gatehouse.http.response import AnyResponse

# A decision function. ``None`` means "not decided, continue".
Rule: TypeAlias = Callable[
    ["RequestContext"], "AnyResponse | None | Awaitable[AnyResponse | None]"
]

# Loads user data for a request; falsy means unauthenticated.
UserFetcher: TypeAlias = Callable[["Request"], Any]

# Legacy fallback invoked when the user fetch or a rule fails.
ErrorHandler: TypeAlias = Callable[["Request"], Any]
