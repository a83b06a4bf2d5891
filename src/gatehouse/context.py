"""Per-request context shared by rules and plugins.

One ``RequestContext`` is created for each incoming request, mutated in
place as the pipeline advances, and discarded when the request ends.
Rules should treat ``data``, ``params``, and ``path`` as read-only and
communicate through ``metadata``.
"""

from dataclasses import dataclass, field
from typing import Any

from gatehouse.http.request import Request


@dataclass(slots=True)
class RequestContext:
    """State carried through one request's pipeline run.

    Attributes:
        request: The incoming request handle.
        path: The request path used for matching.
        data: Result of the user fetcher, or ``None`` until fetched
            (and always ``None`` for unmatched paths).
        params: Parameters extracted from the matched pattern.
        metadata: Mutable mapping shared by plugins and rules.
    """

    request: Request
    path: str
    data: Any = None
    params: dict[str, str] = field(default_factory=dict)
    metadata: dict[str, Any] = field(default_factory=dict)
