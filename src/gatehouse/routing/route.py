"""Route definitions and match results."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from enum import Enum
from types import MappingProxyType
from typing import Any

from gatehouse._internal.types import Rule


class MatchKind(Enum):
    """How a route pattern is compared against the request path."""

    EXACT = "exact"
    PREFIX = "prefix"


@dataclass(frozen=True, slots=True)
class RouteDefinition:
    """A registered route. Immutable once created.

    ``prefix`` is only set for prefix routes and holds the normalized
    stem (no trailing ``/*`` or ``/``). ``metadata`` is read-only.
    """

    pattern: str
    kind: MatchKind
    rules: tuple[Rule, ...]
    priority: int
    prefix: str | None = None
    metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))

    @property
    def is_exact(self) -> bool:
        return self.kind is MatchKind.EXACT


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """A resolved route plus the parameters extracted from the path."""

    route: RouteDefinition
    params: dict[str, str]
