"""Invoke helpers — call sync or async callables uniformly.

Rules, plugin hooks, user fetchers, and cache storages can all be plain
``def`` or ``async def``. Anything that calls user-provided code goes
through :func:`invoke` so the sync/async check lives in one place.

Usage::

    from gatehouse._internal.invoke import invoke

    result = await invoke(rule, context)
"""

import functools
import inspect
from typing import Any

import anyio


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it's awaitable.

    Works with both sync and async callables::

        # sync, result returned as-is
        def is_admin(ctx):
            return None if ctx.data["role"] == "admin" else forbidden()

        # async, coroutine awaited
        async def is_admin(ctx):
            role = await lookup_role(ctx.data)
            return None if role == "admin" else forbidden()
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result


async def invoke_blocking(func: Any, *args: Any) -> Any:
    """Like :func:`invoke`, but run plain ``def`` callables in a worker thread.

    Used for user fetchers, which commonly do blocking I/O (database,
    session store). Coroutine functions are awaited on the event loop.
    """
    if inspect.iscoroutinefunction(func):
        return await func(*args)
    result = await anyio.to_thread.run_sync(functools.partial(func, *args))
    if inspect.isawaitable(result):
        result = await result
    return result
