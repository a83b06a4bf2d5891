"""Plugin base class and the closed set of lifecycle hooks.

A plugin subclasses :class:`Plugin` and overrides any of the five hooks.
Hooks may be plain methods or coroutines::

    class Timing(Plugin):
        name = "timing"

        def before_request(self, context):
            context.metadata["started"] = time.monotonic()

        async def after_request(self, context, result):
            await report(time.monotonic() - context.metadata["started"])

The defaults do nothing, so the pipeline calls every hook on every
plugin without probing for attributes.
"""

from __future__ import annotations

from collections.abc import Awaitable
from enum import Enum
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from gatehouse._internal.types import Rule
    from gatehouse.context import RequestContext
    from gatehouse.http.response import AnyResponse


class Hook(Enum):
    """Lifecycle points, in the order a successful request meets them."""

    BEFORE_REQUEST = "before_request"
    BEFORE_RULE = "before_rule"
    AFTER_RULE = "after_rule"
    AFTER_REQUEST = "after_request"
    ON_ERROR = "on_error"


class Plugin:
    """Base class for pipeline plugins.

    ``name`` identifies the plugin in log messages only.
    """

    name: str = "plugin"

    def before_request(self, context: RequestContext) -> Awaitable[None] | None:
        """Called once, before route resolution and the user fetch."""
        return None

    def before_rule(self, context: RequestContext, rule: Rule) -> Awaitable[None] | None:
        """Called immediately before each rule of the matched route."""
        return None

    def after_rule(
        self,
        context: RequestContext,
        rule: Rule,
        result: AnyResponse | None,
    ) -> Awaitable[None] | None:
        """Called immediately after each rule with its result."""
        return None

    def after_request(
        self,
        context: RequestContext,
        result: AnyResponse,
    ) -> Awaitable[None] | None:
        """Called once with the final response of a successful run."""
        return None

    def on_error(
        self,
        context: RequestContext,
        error: Exception,
    ) -> Awaitable[AnyResponse | None] | AnyResponse | None:
        """Called on a request-level failure.

        Return a response to use it as the fallback and stop further
        ``on_error`` calls; return ``None`` to defer.
        """
        return None

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.name!r}>"
