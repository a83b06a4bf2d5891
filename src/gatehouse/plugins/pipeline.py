"""Plugin pipeline — ordered hook dispatch with per-plugin isolation.

Hooks run strictly in registration order. A hook that raises is logged
with the plugin and hook names and skipped; the rest of the pipeline
carries on. ``on_error`` is the one hook whose result matters: the first
plugin to return a response supplies the fallback.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable
from typing import Any

from gatehouse._internal.invoke import invoke
from gatehouse._internal.types import Rule
from gatehouse.context import RequestContext
from gatehouse.errors import ConfigurationError
from gatehouse.http.response import AnyResponse
from gatehouse.plugins.protocol import Hook, Plugin

logger = logging.getLogger("gatehouse.pipeline")


def _bound_hook(plugin: Plugin, hook: Hook) -> Any:
    match hook:
        case Hook.BEFORE_REQUEST:
            return plugin.before_request
        case Hook.BEFORE_RULE:
            return plugin.before_rule
        case Hook.AFTER_RULE:
            return plugin.after_rule
        case Hook.AFTER_REQUEST:
            return plugin.after_request
        case Hook.ON_ERROR:
            return plugin.on_error


class PluginPipeline:
    """An immutable, ordered list of plugins.

    Usage::

        pipeline = PluginPipeline([LoggingPlugin(), CachingPlugin()])
        await pipeline.before_request(context)
        ...
        fallback = await pipeline.handle_error(context, exc)
    """

    __slots__ = ("_plugins",)

    def __init__(self, plugins: Iterable[Plugin] = ()) -> None:
        checked = tuple(plugins)
        for plugin in checked:
            if not isinstance(plugin, Plugin):
                msg = (
                    f"{plugin!r} is not a Plugin. Subclass gatehouse.plugins.Plugin "
                    "and override the hooks you need."
                )
                raise ConfigurationError(msg)
        self._plugins = checked

    @property
    def plugins(self) -> tuple[Plugin, ...]:
        return self._plugins

    def __len__(self) -> int:
        return len(self._plugins)

    async def _run(self, hook: Hook, *args: Any) -> None:
        for plugin in self._plugins:
            try:
                await invoke(_bound_hook(plugin, hook), *args)
            except Exception:
                logger.exception("Plugin %s error in %s", plugin.name, hook.value)

    # -- Observing hooks --

    async def before_request(self, context: RequestContext) -> None:
        await self._run(Hook.BEFORE_REQUEST, context)

    async def before_rule(self, context: RequestContext, rule: Rule) -> None:
        await self._run(Hook.BEFORE_RULE, context, rule)

    async def after_rule(
        self,
        context: RequestContext,
        rule: Rule,
        result: AnyResponse | None,
    ) -> None:
        await self._run(Hook.AFTER_RULE, context, rule, result)

    async def after_request(self, context: RequestContext, result: AnyResponse) -> None:
        await self._run(Hook.AFTER_REQUEST, context, result)

    # -- Error escape hatch --

    async def handle_error(
        self,
        context: RequestContext,
        error: Exception,
    ) -> AnyResponse | None:
        """Offer *error* to each plugin; return the first fallback response."""
        for plugin in self._plugins:
            try:
                result = await invoke(_bound_hook(plugin, Hook.ON_ERROR), context, error)
            except Exception:
                logger.exception("Plugin %s error in %s", plugin.name, Hook.ON_ERROR.value)
                continue
            if result is not None:
                return result
        return None
