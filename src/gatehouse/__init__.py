"""Gatehouse — route-aware policy gating in front of HTTP handlers.

Resolve the request path against prioritized routes, run the matched
route's rules, and let plugins observe or override every step.

Basic usage::

    from gatehouse import GatekeeperConfig, PolicyBuilder, Request, rules

    handler = (
        PolicyBuilder(GatekeeperConfig(fetch_user=load_user))
        .exact("/dashboard", rules.is_logged_in())
        .prefix("/admin", rules.has_role("admin"))
        .build()
    )

    decision = await handler(Request.build("https://example.com/admin/users"))
"""

__version__ = "0.1.0"
__all__ = [
    "AnyResponse",
    "ConfigurationError",
    "GatehouseError",
    "GatekeeperConfig",
    "LegacyMiddleware",
    "MissingUserData",
    "PassThrough",
    "Plugin",
    "PolicyBuilder",
    "PolicyHandler",
    "PolicyMiddleware",
    "Redirect",
    "Request",
    "RequestContext",
    "Response",
    "RouteTable",
    "responses",
    "rules",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import gatehouse`` fast while providing a clean top-level API.
    """
    if name in ("PolicyBuilder", "PolicyHandler"):
        from gatehouse import builder as _builder

        return getattr(_builder, name)

    if name == "GatekeeperConfig":
        from gatehouse.config import GatekeeperConfig

        return GatekeeperConfig

    if name == "LegacyMiddleware":
        from gatehouse.legacy import LegacyMiddleware

        return LegacyMiddleware

    if name == "PolicyMiddleware":
        from gatehouse.asgi import PolicyMiddleware

        return PolicyMiddleware

    if name == "Request":
        from gatehouse.http.request import Request

        return Request

    if name in ("AnyResponse", "PassThrough", "Redirect", "Response"):
        from gatehouse.http import response as _resp

        return getattr(_resp, name)

    if name == "RequestContext":
        from gatehouse.context import RequestContext

        return RequestContext

    if name == "Plugin":
        from gatehouse.plugins.protocol import Plugin

        return Plugin

    if name == "RouteTable":
        from gatehouse.routing.table import RouteTable

        return RouteTable

    if name in ("ConfigurationError", "GatehouseError", "MissingUserData"):
        from gatehouse import errors as _errors

        return getattr(_errors, name)

    if name in ("responses", "rules"):
        import importlib

        return importlib.import_module(f"gatehouse.{name}")

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
