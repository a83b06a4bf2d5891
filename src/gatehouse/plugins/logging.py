"""Logging plugin — trace requests and rule decisions.

Writes through the ``gatehouse.plugins.logging`` logger; configure
handlers and formatting the usual way with :mod:`logging`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from gatehouse._internal.types import Rule
from gatehouse.context import RequestContext
from gatehouse.http.response import AnyResponse, Redirect
from gatehouse.plugins.protocol import Plugin

logger = logging.getLogger("gatehouse.plugins.logging")


@dataclass(frozen=True, slots=True)
class LoggingConfig:
    """Logging plugin configuration.

    Attributes:
        enabled: Silence the plugin when ``False``.
        level: Threshold (``"debug"``, ``"info"``, ``"warning"``,
            ``"error"``); quieter messages are dropped.
        prefix: Prepended to every message.
        include_headers: Log request headers at DEBUG on each request.
    """

    enabled: bool = True
    level: str = "info"
    prefix: str = "[gatehouse]"
    include_headers: bool = False


class LoggingPlugin(Plugin):
    """Log each pipeline phase of every request."""

    name = "logging"

    __slots__ = ("_config", "_threshold")

    def __init__(self, config: LoggingConfig | None = None) -> None:
        self._config = config or LoggingConfig()
        threshold = logging.getLevelName(self._config.level.upper())
        self._threshold = threshold if isinstance(threshold, int) else logging.INFO

    def _log(self, level: int, message: str, *args: object) -> None:
        if not self._config.enabled or level < self._threshold:
            return
        logger.log(level, "%s " + message, self._config.prefix, *args)

    def before_request(self, context: RequestContext) -> None:
        self._log(logging.INFO, "Processing path: %s", context.path)
        if self._config.include_headers:
            self._log(logging.DEBUG, "Headers: %s", dict(context.request.headers))

    def before_rule(self, context: RequestContext, rule: Rule) -> None:
        self._log(
            logging.DEBUG,
            "Executing rule %s for %s",
            getattr(rule, "__qualname__", repr(rule)),
            context.path,
        )

    def after_rule(
        self,
        context: RequestContext,
        rule: Rule,
        result: AnyResponse | None,
    ) -> None:
        if result is None:
            return
        if isinstance(result, Redirect):
            self._log(logging.INFO, "Rule redirecting to: %s", result.url)
        else:
            self._log(logging.INFO, "Rule returned response for %s", context.path)

    def after_request(self, context: RequestContext, result: AnyResponse) -> None:
        if not isinstance(result, Redirect):
            self._log(logging.INFO, "Request completed for %s", context.path)

    def on_error(self, context: RequestContext, error: Exception) -> None:
        self._log(logging.ERROR, "Error processing %s: %s", context.path, error)
