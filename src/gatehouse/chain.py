"""Rule chain execution.

Runs a matched route's rules in registration order against one request
context. The first rule to return a response ends the chain; a chain in
which every rule returns ``None`` lets the request continue. Rules only
see each other through ``context.metadata``.

Exceptions raised by a rule are not caught here. They are request-level
failures and belong to the builder's error handling.
"""

from __future__ import annotations

from gatehouse._internal.invoke import invoke
from gatehouse.context import RequestContext
from gatehouse.http.response import AnyResponse
from gatehouse.plugins.pipeline import PluginPipeline
from gatehouse.routing.route import RouteDefinition


async def run_chain(
    route: RouteDefinition,
    context: RequestContext,
    pipeline: PluginPipeline,
) -> AnyResponse | None:
    """Run *route*'s rules, wrapped in ``before_rule``/``after_rule`` hooks.

    Returns the deciding rule's response, or ``None`` if no rule decided.
    """
    for rule in route.rules:
        await pipeline.before_rule(context, rule)
        result = await invoke(rule, context)
        await pipeline.after_rule(context, rule, result)
        if result is not None:
            return result
    return None
