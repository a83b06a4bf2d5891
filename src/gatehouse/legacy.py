"""Legacy matcher — the pre-builder API, kept for callers that have not migrated.

Differs from :class:`~gatehouse.builder.PolicyBuilder` in three ways:

- Precedence is coarse: wildcard patterns (ending in ``/*``) sort after
  all others, registration order otherwise. Only the first matching
  pattern's rules run.
- Rules do not return responses. They call ``ctx.next()`` or
  ``ctx.redirect(path, ...)``; the first redirect recorded before any
  rule calls ``next()`` wins, anything else passes through.
- Only requests matching an ``auth_paths`` pattern fetch user data. A
  failed or empty fetch goes to ``on_error`` if given; otherwise the
  request produces no response at all (``None``) and the caller must
  decide what to do.

Usage::

    middleware = LegacyMiddleware(
        fetch=load_user,
        rules={
            "/dashboard": [require_profile],
            "/blog/*": [require_subscription],
        },
        auth_paths=["/dashboard", "/blog/*"],
        on_error=lambda request: redirect("/sign-in", request.url),
    )
    response = await middleware.handle(request)
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import urlencode

from gatehouse._internal.invoke import invoke, invoke_blocking
from gatehouse._internal.types import ErrorHandler, UserFetcher
from gatehouse.audit import emit_security_event
from gatehouse.errors import ConfigurationError, MissingUserData
from gatehouse.http.request import Request
from gatehouse.http.response import AnyResponse
from gatehouse.responses import passthrough, redirect
from gatehouse.routing.matching import is_param_segment

logger = logging.getLogger("gatehouse.legacy")


def is_wildcard(pattern: str) -> bool:
    return pattern.endswith("/*")


def legacy_match(pattern: str, path: str) -> bool:
    """Segment-wise match: literal, ``*``, or ``[name]`` at each index.

    Only the pattern's segments are checked, so a pattern also matches
    longer paths that share its leading segments.
    """
    path_parts = path.split("/")
    for index, part in enumerate(pattern.split("/")):
        if part == "*" or is_param_segment(part):
            continue
        if index >= len(path_parts) or part != path_parts[index]:
            return False
    return True


def sort_patterns(patterns: Iterable[str]) -> list[str]:
    """Non-wildcards first, wildcards last, registration order within each."""
    return sorted(patterns, key=is_wildcard)


def legacy_params(pattern: str, path: str) -> dict[str, str]:
    """Bind each ``[name]`` pattern segment to the path segment at its index."""
    path_parts = path.split("/")
    return {
        part[1:-1]: path_parts[index] if index < len(path_parts) else ""
        for index, part in enumerate(pattern.split("/"))
        if is_param_segment(part)
    }


def build_redirect_path(
    path: str,
    *,
    params: Mapping[str, str] | None = None,
    query: Mapping[str, str] | None = None,
    hash: str | None = None,
) -> str:
    """Fill ``[name]`` segments from *params* and append query and fragment.

    ``build_redirect_path("/users/[id]", params={"id": "7"}, query={"tab": "a"})``
    gives ``"/users/7?tab=a"``.
    """
    if params is not None:
        path = "/".join(
            str(params.get(part[1:-1], "")) if is_param_segment(part) else part
            for part in path.split("/")
        )
    if query:
        path = f"{path}?{urlencode(query)}"
    if hash:
        path = f"{path}#{hash}"
    return path


@dataclass(slots=True)
class LegacyRuleContext:
    """What a legacy rule receives.

    ``next()`` marks the request as allowed to continue. ``redirect()``
    records a target, but only while no rule has called ``next()`` and
    no redirect has been recorded yet.
    """

    data: Any
    path: str
    params: dict[str, str]
    next_called: bool = False
    redirect_path: str | None = field(default=None)

    def next(self) -> None:
        self.next_called = True

    def redirect(
        self,
        path: str,
        *,
        params: Mapping[str, str] | None = None,
        query: Mapping[str, str] | None = None,
        hash: str | None = None,
    ) -> None:
        if self.next_called or self.redirect_path is not None:
            return
        self.redirect_path = build_redirect_path(path, params=params, query=query, hash=hash)


# A legacy rule inspects the context and calls next() or redirect()
type LegacyRule = Callable[[LegacyRuleContext], Any]


class LegacyMiddleware:
    """The legacy auth-gating matcher.

    Args:
        fetch: Sync or async user loader; falsy means unauthenticated.
        rules: Pattern -> ordered rule list. Iteration order is the
            registration order used for tie-breaks.
        auth_paths: Patterns (same syntax as *rules*) that require data.
        on_error: Called with the request when the fetch or a rule fails.
    """

    __slots__ = ("_auth_paths", "_fetch", "_on_error", "_rules")

    def __init__(
        self,
        *,
        fetch: UserFetcher,
        rules: Mapping[str, Sequence[LegacyRule]],
        auth_paths: Iterable[str],
        on_error: ErrorHandler | None = None,
    ) -> None:
        if not callable(fetch):
            msg = "LegacyMiddleware requires a callable 'fetch'."
            raise ConfigurationError(msg)
        self._fetch = fetch
        self._rules: dict[str, tuple[LegacyRule, ...]] = {
            pattern: tuple(chain) for pattern, chain in rules.items()
        }
        self._auth_paths = tuple(auth_paths)
        self._on_error = on_error

    def is_protected(self, path: str) -> bool:
        return any(legacy_match(pattern, path) for pattern in self._auth_paths)

    async def handle(self, request: Request) -> AnyResponse | None:
        """Gate *request*. ``None`` means no response was produced."""
        path = request.path
        if not self.is_protected(path):
            return passthrough()

        try:
            data = await invoke_blocking(self._fetch, request)
            if not data:
                raise MissingUserData(path)
            return await self._apply(request, path, data)
        except Exception as exc:
            logger.debug("Legacy gate failed for %s: %r", path, exc)
            emit_security_event(
                "legacy.error",
                request=request,
                details={"error": type(exc).__name__, "handled": self._on_error is not None},
            )
            if self._on_error is not None:
                return await invoke(self._on_error, request)
            return None

    __call__ = handle

    async def _apply(self, request: Request, path: str, data: Any) -> AnyResponse | None:
        ordered = sort_patterns(p for p in self._rules if legacy_match(p, path))
        if not ordered:
            return None

        pattern = ordered[0]
        context = LegacyRuleContext(data=data, path=path, params=legacy_params(pattern, path))
        for rule in self._rules[pattern]:
            await invoke(rule, context)
            if context.redirect_path is not None:
                break

        target = context.redirect_path
        if target is not None and target != path:
            return redirect(target, request.url)
        return passthrough()
