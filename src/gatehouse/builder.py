"""Policy builder — fluent route registration compiled into one handler.

Usage::

    from gatehouse import GatekeeperConfig, PolicyBuilder, rules
    from gatehouse.plugins import LoggingPlugin

    handler = (
        PolicyBuilder(GatekeeperConfig(fetch_user=load_user, auth_paths=("/sign-in",)))
        .use(LoggingPlugin())
        .exact("/dashboard", rules.is_logged_in())
        .prefix("/admin", rules.is_logged_in(), rules.has_role("admin"))
        .route("/users/[id]", rules=[owns_profile], metadata={"section": "users"})
        .build()
    )

    response = await handler(request)

The built handler never raises. Each request walks::

    BEFORE_REQUEST -> RESOLVING -> NO_MATCH
                                -> MATCHED -> FETCHING_DATA -> EXECUTING_RULES
                   -> AFTER_REQUEST -> DONE

Any failure after ``BEFORE_REQUEST`` moves to ``ERROR_HANDLING``, where
plugins may supply a fallback before the default policy applies: pass
through for configured auth paths and for the sign-in page itself,
otherwise redirect to sign-in.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import replace
from urllib.parse import urlsplit
from enum import Enum
from typing import Any

from gatehouse._internal.invoke import invoke_blocking
from gatehouse._internal.types import Rule, UserFetcher
from gatehouse.audit import emit_security_event
from gatehouse.chain import run_chain
from gatehouse.config import GatekeeperConfig
from gatehouse.context import RequestContext
from gatehouse.errors import ConfigurationError, MissingUserData
from gatehouse.http.request import Request
from gatehouse.http.response import AnyResponse
from gatehouse.plugins.pipeline import PluginPipeline
from gatehouse.plugins.protocol import Plugin
from gatehouse.responses import passthrough, redirect
from gatehouse.routing.table import RouteTable

logger = logging.getLogger("gatehouse.builder")

# Metadata key holding the PipelineState a request reached
STATE_KEY = "gatehouse.state"


class PipelineState(Enum):
    """Phases of one request's pipeline run."""

    IDLE = "idle"
    BEFORE_REQUEST = "before_request"
    RESOLVING = "resolving"
    NO_MATCH = "no_match"
    MATCHED = "matched"
    FETCHING_DATA = "fetching_data"
    EXECUTING_RULES = "executing_rules"
    AFTER_REQUEST = "after_request"
    ERROR_HANDLING = "error_handling"
    DONE = "done"


def is_auth_path(path: str, auth_paths: Iterable[str]) -> bool:
    """Whether *path* is covered by one of *auth_paths*.

    Plain entries match exactly. Entries ending in ``/*`` match any path
    that starts with the stem, with no segment boundary check, so
    ``/api/*`` also covers ``/apiary``.
    """
    for auth_path in auth_paths:
        if auth_path.endswith("/*"):
            if path.startswith(auth_path[:-2]):
                return True
        elif path == auth_path:
            return True
    return False


class PolicyHandler:
    """The request handler produced by :meth:`PolicyBuilder.build`.

    Holds a snapshot of the builder's routes, plugins, and auth paths;
    registrations made on the builder afterwards do not affect it.
    """

    __slots__ = (
        "_auth_paths",
        "_default_metadata",
        "_fetch_user",
        "_pipeline",
        "_sign_in_url",
        "_table",
    )

    def __init__(
        self,
        *,
        table: RouteTable,
        pipeline: PluginPipeline,
        fetch_user: UserFetcher,
        auth_paths: tuple[str, ...],
        default_metadata: Mapping[str, Any],
        sign_in_url: str,
    ) -> None:
        self._table = table
        self._pipeline = pipeline
        self._fetch_user = fetch_user
        self._auth_paths = auth_paths
        self._default_metadata = dict(default_metadata)
        self._sign_in_url = sign_in_url

    def _advance(self, context: RequestContext, state: PipelineState) -> None:
        context.metadata[STATE_KEY] = state
        logger.debug("%s -> %s", context.path, state.value)

    async def __call__(self, request: Request) -> AnyResponse:
        context = RequestContext(
            request=request,
            path=request.path,
            metadata=dict(self._default_metadata),
        )
        self._advance(context, PipelineState.BEFORE_REQUEST)
        try:
            await self._pipeline.before_request(context)

            self._advance(context, PipelineState.RESOLVING)
            match = self._table.match(context.path)
            if match is None:
                self._advance(context, PipelineState.NO_MATCH)
                return await self._finish(context, passthrough())

            self._advance(context, PipelineState.MATCHED)
            context.params = match.params
            context.metadata.update(match.route.metadata)

            # A before_request hook (e.g. a cache) may already have supplied data.
            if context.data is None:
                self._advance(context, PipelineState.FETCHING_DATA)
                context.data = await invoke_blocking(self._fetch_user, request)
            if not context.data:
                raise MissingUserData(context.path)

            self._advance(context, PipelineState.EXECUTING_RULES)
            result = await run_chain(match.route, context, self._pipeline)
            return await self._finish(context, result if result is not None else passthrough())
        except Exception as exc:
            self._advance(context, PipelineState.ERROR_HANDLING)
            return await self._recover(context, exc)

    async def _finish(self, context: RequestContext, result: AnyResponse) -> AnyResponse:
        self._advance(context, PipelineState.AFTER_REQUEST)
        await self._pipeline.after_request(context, result)
        self._advance(context, PipelineState.DONE)
        return result

    async def _recover(self, context: RequestContext, error: Exception) -> AnyResponse:
        logger.debug("Request to %s failed: %r", context.path, error)
        fallback = await self._pipeline.handle_error(context, error)
        if fallback is not None:
            self._advance(context, PipelineState.DONE)
            return fallback

        if is_auth_path(context.path, self._auth_paths):
            result: AnyResponse = passthrough()
            outcome = "passthrough"
        else:
            result = redirect(self._sign_in_url, context.request.url)
            outcome = "redirect"
        emit_security_event(
            "gate.error.fallback",
            request=context.request,
            details={"outcome": outcome, "error": type(error).__name__},
        )
        self._advance(context, PipelineState.DONE)
        return result


class PolicyBuilder:
    """Fluent registration API for routes, rules, plugins, and auth paths.

    Takes a :class:`GatekeeperConfig`, or its fields as keywords
    (``PolicyBuilder(fetch_user=load_user)``); keywords given alongside a
    config override its fields. Every registration method returns the
    builder, so calls chain.
    """

    __slots__ = ("_auth_paths", "_config", "_plugins", "_table")

    def __init__(self, config: GatekeeperConfig | None = None, **options: Any) -> None:
        if config is None:
            config = GatekeeperConfig(**options)
        elif options:
            config = replace(config, **options)
        self._config = config
        if self._config.fetch_user is None:
            msg = "GatekeeperConfig requires 'fetch_user' to be set."
            raise ConfigurationError(msg)
        self._table = RouteTable(self._config.default_metadata)
        self._plugins: list[Plugin] = []
        self._auth_paths: list[str] = list(self._config.auth_paths)
        for plugin in self._config.plugins:
            self.use(plugin)

    # -- Plugins and auth paths --

    def use(self, plugin: Plugin) -> PolicyBuilder:
        """Append a plugin. Plugins run in the order they are added."""
        if not isinstance(plugin, Plugin):
            msg = f"{plugin!r} is not a Plugin."
            raise ConfigurationError(msg)
        self._plugins.append(plugin)
        return self

    def register_auth_paths(self, paths: Iterable[str]) -> PolicyBuilder:
        """Add paths that pass through, rather than redirect, on failure.

        The path of ``sign_in_url`` is always treated as one.
        """
        self._auth_paths.extend(paths)
        return self

    # -- Routes --

    def exact(self, path: str, *rules: Rule) -> PolicyBuilder:
        """Run *rules* for requests whose path equals *path*."""
        self._table.register_exact(path, *rules)
        return self

    def prefix(self, path: str, *rules: Rule) -> PolicyBuilder:
        """Run *rules* for *path* and every path beneath it."""
        self._table.register_prefix(path, *rules)
        return self

    def route(
        self,
        path: str,
        *,
        rules: Iterable[Rule],
        is_exact: bool = True,
        metadata: Mapping[str, Any] | None = None,
    ) -> PolicyBuilder:
        """Register a route with explicit match kind and metadata."""
        self._table.register_custom(path, rules=rules, is_exact=is_exact, metadata=metadata)
        return self

    @property
    def routes(self) -> RouteTable:
        """The route table being built."""
        return self._table

    # -- Build --

    def _effective_auth_paths(self) -> tuple[str, ...]:
        # The sign-in page never redirects to itself.
        sign_in_path = urlsplit(self._config.sign_in_url).path or "/"
        if sign_in_path in self._auth_paths:
            return tuple(self._auth_paths)
        return (*self._auth_paths, sign_in_path)

    def build(self) -> PolicyHandler:
        """Snapshot the current registrations into a request handler."""
        return PolicyHandler(
            table=self._table.copy(),
            pipeline=PluginPipeline(self._plugins),
            fetch_user=self._config.fetch_user,  # type: ignore[arg-type]
            auth_paths=self._effective_auth_paths(),
            default_metadata=self._config.default_metadata,
            sign_in_url=self._config.sign_in_url,
        )
