"""Routing — priority-ordered route table with exact and prefix matching.

Routes are registered during setup; resolution sorts by priority and
returns the first pattern that matches the request path.
"""

from gatehouse.routing.matching import extract_params, matches, normalize_prefix
from gatehouse.routing.priority import MAX_EXACT_DEPTH, MAX_PREFIX_DEPTH, calculate_priority
from gatehouse.routing.route import MatchKind, RouteDefinition, RouteMatch
from gatehouse.routing.table import RouteTable

__all__ = [
    "MAX_EXACT_DEPTH",
    "MAX_PREFIX_DEPTH",
    "MatchKind",
    "RouteDefinition",
    "RouteMatch",
    "RouteTable",
    "calculate_priority",
    "extract_params",
    "matches",
    "normalize_prefix",
]
