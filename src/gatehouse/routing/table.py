"""Route table with fluent registration and priority resolution.

Usage::

    table = RouteTable()
    table.register_exact("/", home_rule).register_prefix("/admin", is_admin)
    route = table.resolve("/admin/users")
"""

from __future__ import annotations

from collections.abc import Iterable, Mapping
from types import MappingProxyType
from typing import Any

from gatehouse._internal.types import Rule
from gatehouse.errors import ConfigurationError
from gatehouse.routing.matching import extract_params, matches, normalize_prefix
from gatehouse.routing.priority import calculate_priority
from gatehouse.routing.route import MatchKind, RouteDefinition, RouteMatch


def _check_pattern(pattern: str) -> None:
    if not isinstance(pattern, str):
        msg = f"Route pattern must be a string, got {type(pattern).__name__}."
        raise ConfigurationError(msg)
    segments = pattern.split("/")
    if "*" in segments[:-1]:
        msg = f"Wildcard '*' must be the final segment of {pattern!r}."
        raise ConfigurationError(msg)


def _check_rules(pattern: str, rules: Iterable[Any]) -> tuple[Rule, ...]:
    checked = tuple(rules)
    for rule in checked:
        if not callable(rule):
            msg = f"Rule {rule!r} for {pattern!r} is not callable."
            raise ConfigurationError(msg)
    return checked


class RouteTable:
    """An ordered collection of route definitions.

    Registration order is kept and breaks priority ties during
    resolution. Resolution never mutates the table.
    """

    __slots__ = ("_default_metadata", "_routes")

    def __init__(self, default_metadata: Mapping[str, Any] | None = None) -> None:
        self._routes: list[RouteDefinition] = []
        self._default_metadata: dict[str, Any] = dict(default_metadata or {})

    def _add(
        self,
        pattern: str,
        rules: Iterable[Any],
        *,
        is_exact: bool,
        metadata: Mapping[str, Any] | None = None,
    ) -> RouteTable:
        _check_pattern(pattern)
        checked = _check_rules(pattern, rules)
        self._routes.append(
            RouteDefinition(
                pattern=pattern,
                kind=MatchKind.EXACT if is_exact else MatchKind.PREFIX,
                rules=checked,
                priority=calculate_priority(pattern, is_exact),
                prefix=None if is_exact else normalize_prefix(pattern),
                metadata=MappingProxyType({**self._default_metadata, **(metadata or {})}),
            )
        )
        return self

    # -- Registration --

    def register_exact(self, pattern: str, *rules: Rule) -> RouteTable:
        """Register *rules* for requests whose path equals *pattern*."""
        return self._add(pattern, rules, is_exact=True)

    def register_prefix(self, pattern: str, *rules: Rule) -> RouteTable:
        """Register *rules* for *pattern* and everything beneath it.

        ``"/docs"``, ``"/docs/"`` and ``"/docs/*"`` are equivalent.
        """
        return self._add(pattern, rules, is_exact=False)

    def register_custom(
        self,
        pattern: str,
        *,
        rules: Iterable[Rule],
        is_exact: bool = True,
        metadata: Mapping[str, Any] | None = None,
    ) -> RouteTable:
        """Register a route with explicit match kind and metadata.

        Route metadata is layered over the table's default metadata.
        """
        return self._add(pattern, rules, is_exact=is_exact, metadata=metadata)

    # -- Resolution --

    @property
    def routes(self) -> tuple[RouteDefinition, ...]:
        """All routes in resolution order (priority, then registration)."""
        return tuple(sorted(self._routes, key=lambda r: r.priority))

    def resolve(self, path: str) -> RouteDefinition | None:
        """Return the highest-precedence route matching *path*, if any."""
        for route in self.routes:
            if matches(path, route.pattern, route.is_exact, route.prefix):
                return route
        return None

    def match(self, path: str) -> RouteMatch | None:
        """Resolve *path* and extract its parameters."""
        route = self.resolve(path)
        if route is None:
            return None
        params = extract_params(path, route.pattern, route.is_exact, route.prefix)
        return RouteMatch(route=route, params=params)

    def copy(self) -> RouteTable:
        """A shallow copy; later registrations on either side are independent."""
        clone = RouteTable(self._default_metadata)
        clone._routes = list(self._routes)
        return clone

    def __len__(self) -> int:
        return len(self._routes)
