"""Route precedence.

Lower priority values are tried first. Exact routes score ten per
``/``-split segment. Prefix routes score ``1000 + (100 - depth)``, so
deeper prefixes are tried before shallower ones.

An exact route of up to :data:`MAX_EXACT_DEPTH` segments outranks every
prefix route of up to :data:`MAX_PREFIX_DEPTH` segments. One segment
deeper, an exact route ties with the deepest prefix and registration
order decides. Neither limit is enforced.
"""

# Prefix patterns deeper than this are not supported.
MAX_PREFIX_DEPTH = 100

# Deepest exact pattern guaranteed to rank ahead of every prefix.
MAX_EXACT_DEPTH = 98

_EXACT_STEP = 10
_PREFIX_BASE = 1000


def strip_wildcard(pattern: str) -> str:
    """Remove a single trailing ``/*`` from *pattern*."""
    if pattern.endswith("/*"):
        return pattern[:-2]
    return pattern


def calculate_priority(pattern: str, is_exact: bool) -> int:
    """Return the precedence of *pattern* (lower = tried first).

    Examples::

        calculate_priority("/admin", True)        -> 20
        calculate_priority("/admin/users", True)  -> 30
        calculate_priority("/admin", False)       -> 1099
        calculate_priority("/admin/users/*", False) -> 1098
    """
    if is_exact:
        return len(pattern.split("/")) * _EXACT_STEP
    segments = [s for s in strip_wildcard(pattern).split("/") if s]
    return _PREFIX_BASE + (MAX_PREFIX_DEPTH - len(segments))
