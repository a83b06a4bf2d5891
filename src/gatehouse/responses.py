"""Response-construction helpers for rules and plugins.

Thin constructors over :mod:`gatehouse.http.response`::

    from gatehouse import responses

    def admins_only(ctx):
        if ctx.data.get("role") != "admin":
            return responses.forbidden("Required role: admin")
        return None
"""

import json as json_module
from typing import Any
from urllib.parse import urljoin

from gatehouse.http.response import PassThrough, Redirect, Response

JSON_CONTENT_TYPE = "application/json"


def passthrough() -> PassThrough:
    """Continue to the wrapped handler."""
    return PassThrough()


def redirect(url: str, base_url: str | None = None) -> Redirect:
    """Redirect to *url*, resolved against *base_url* when given."""
    if base_url:
        url = urljoin(base_url, url)
    return Redirect(url)


def json(body: Any, status: int = 200) -> Response:
    """A JSON response."""
    return Response(
        body=json_module.dumps(body),
        status=status,
        content_type=JSON_CONTENT_TYPE,
    )


def unauthorized(message: str = "Unauthorized") -> Response:
    """401 with ``{"error": message}``."""
    return json({"error": message}, 401)


def forbidden(message: str = "Forbidden") -> Response:
    """403 with ``{"error": message}``."""
    return json({"error": message}, 403)


def not_found(message: str = "Not Found") -> Response:
    """404 with ``{"error": message}``."""
    return json({"error": message}, 404)
