"""Built-in rule factories.

Each factory returns a rule: a callable taking a
:class:`~gatehouse.context.RequestContext` and returning a response to
stop the chain, or ``None`` to continue.

User data may be a mapping (``{"role": "admin"}``) or an object with
attributes (``user.role``); both are read the same way.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from typing import Any

from gatehouse._internal.types import Rule
from gatehouse.context import RequestContext
from gatehouse.errors import ConfigurationError
from gatehouse.http.request import Request
from gatehouse.http.response import AnyResponse
from gatehouse.ratelimit import RateLimitStore
from gatehouse.responses import forbidden, json, passthrough, redirect


def _field(data: Any, name: str) -> Any:
    if data is None:
        return None
    if isinstance(data, Mapping):
        return data.get(name)
    return getattr(data, name, None)


def is_logged_in(sign_in_url: str = "/sign-in") -> Rule:
    """Redirect to *sign_in_url* unless user data is present.

    Under :class:`~gatehouse.builder.PolicyBuilder` an anonymous request
    never reaches a rule: the missing data sends it to the error policy,
    which redirects to the configured ``sign_in_url`` anyway. The redirect
    branch here serves rules called directly or from custom pipelines.
    """

    def rule(context: RequestContext) -> AnyResponse | None:
        if context.data:
            return None
        return redirect(sign_in_url, context.request.url)

    return rule


def is_not_logged_in(home_url: str = "/") -> Rule:
    """Redirect signed-in users to *home_url*.

    Under :class:`~gatehouse.builder.PolicyBuilder` only signed-in users
    reach this rule; anonymous visitors to the sign-in page pass through
    via the error policy, which treats that page as an auth path. When
    called directly with no user data, the rule passes through, which
    also ends the chain.
    """

    def rule(context: RequestContext) -> AnyResponse | None:
        if not context.data:
            return passthrough()
        return redirect(home_url, context.request.url)

    return rule


def has_role(role: str) -> Rule:
    """403 unless the user's ``role`` equals *role* or ``roles`` contains it."""

    def rule(context: RequestContext) -> AnyResponse | None:
        if _field(context.data, "role") == role or role in (_field(context.data, "roles") or ()):
            return None
        return forbidden(f"Required role: {role}")

    return rule


def has_permission(permission: str) -> Rule:
    """403 unless the user's ``permissions`` contain *permission*."""

    def rule(context: RequestContext) -> AnyResponse | None:
        if permission in (_field(context.data, "permissions") or ()):
            return None
        return forbidden(f"Required permission: {permission}")

    return rule


def redirect_to(destination: str) -> Rule:
    """Always redirect to *destination*."""

    def rule(context: RequestContext) -> AnyResponse | None:
        return redirect(destination, context.request.url)

    return rule


def client_key(request: Request, key_header: str | None = "x-forwarded-for") -> str:
    """Identify the client: proxy header first hop, ``x-real-ip``, peer, ``"unknown"``."""
    if key_header:
        raw = request.headers.get(key_header)
        if raw:
            forwarded = raw.split(",")[0].strip()
            if forwarded:
                return forwarded
    real_ip = request.headers.get("x-real-ip")
    if real_ip:
        return real_ip.strip()
    if request.client:
        return request.client[0]
    return "unknown"


def rate_limit(
    requests: int,
    window_seconds: float,
    *,
    store: RateLimitStore | None = None,
    key_header: str | None = "x-forwarded-for",
) -> Rule:
    """429 once a client exceeds *requests* within *window_seconds*.

    Pass a shared *store* to share the budget across rules or to
    inspect it in tests; by default each rule gets its own.
    """
    if requests < 1 or window_seconds <= 0:
        msg = "rate_limit requires requests >= 1 and window_seconds > 0."
        raise ConfigurationError(msg)
    counters = store if store is not None else RateLimitStore()

    def rule(context: RequestContext) -> AnyResponse | None:
        key = client_key(context.request, key_header)
        allowed, retry_after = counters.hit(key, limit=requests, window_seconds=window_seconds)
        if allowed:
            return None
        return json({"error": "Rate limit exceeded"}, 429).with_header(
            "Retry-After", str(retry_after)
        )

    return rule


def custom(fn: Callable[[RequestContext], Any]) -> Rule:
    """Use *fn* as a rule as-is, after checking it is callable."""
    if not callable(fn):
        msg = f"{fn!r} is not callable."
        raise ConfigurationError(msg)
    return fn
