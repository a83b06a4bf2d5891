"""Path matching and parameter extraction.

Pure functions, no state. Two match kinds:

- exact: ``path == pattern``, byte for byte.
- prefix: ``path == prefix`` or ``path`` starts with ``prefix + "/"``.

Bracket segments (``/users/[id]``) bind positionally in both kinds;
prefix routes also bind the remainder of the path to ``"*"``.
"""

from gatehouse.routing.priority import strip_wildcard


def normalize_prefix(pattern: str) -> str:
    """Derive the stored prefix for a prefix route.

    Strips a trailing ``/*`` and then one trailing ``/``::

        "/docs"   -> "/docs"
        "/docs/"  -> "/docs"
        "/docs/*" -> "/docs"
        "/"       -> ""
    """
    prefix = strip_wildcard(pattern)
    if prefix.endswith("/"):
        prefix = prefix[:-1]
    return prefix


def is_param_segment(segment: str) -> bool:
    """True for ``[name]`` segments."""
    return len(segment) >= 2 and segment.startswith("[") and segment.endswith("]")


def matches(path: str, pattern: str, is_exact: bool, prefix: str | None = None) -> bool:
    """Whether *path* satisfies *pattern*."""
    if is_exact:
        return path == pattern
    stem = prefix if prefix is not None else normalize_prefix(pattern)
    return path == stem or path.startswith(stem + "/")


def extract_params(
    path: str,
    pattern: str,
    is_exact: bool,
    prefix: str | None = None,
) -> dict[str, str]:
    """Extract bracket and wildcard parameters from *path*.

    Values are the raw path segments, never validated or decoded. A
    bracket segment beyond the end of *path* binds ``""``.
    """
    params: dict[str, str] = {}

    if not is_exact:
        stem = prefix if prefix is not None else normalize_prefix(pattern)
        remaining = path[len(stem) :]
        if remaining.startswith("/"):
            params["*"] = remaining[1:]
        elif remaining == "":
            params["*"] = ""

    if "[" in pattern and "]" in pattern:
        path_parts = path.split("/")
        for index, part in enumerate(pattern.split("/")):
            if is_param_segment(part):
                params[part[1:-1]] = path_parts[index] if index < len(path_parts) else ""

    return params
