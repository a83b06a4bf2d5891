"""Responses the gate can decide on.

Three shapes, all frozen dataclasses with the same chainable
``.with_*()`` header API:

- ``PassThrough``: let the request continue to the wrapped handler.
- ``Redirect``: send the client elsewhere.
- ``Response``: answer directly (errors, JSON bodies).
"""

from collections.abc import Mapping
from dataclasses import dataclass, replace


@dataclass(frozen=True, slots=True)
class Response:
    """A terminal HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> "Response":
        """Return a new Response with a different status code."""
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        """Return a new Response with an additional header."""
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        """Return a new Response with additional headers."""
        return replace(self, headers=(*self.headers, *headers.items()))

    @property
    def body_bytes(self) -> bytes:
        """Body as bytes."""
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        """Body as string."""
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect response. ``url`` is sent verbatim as ``Location``."""

    url: str
    status: int = 307
    headers: tuple[tuple[str, str], ...] = ()

    def with_status(self, status: int) -> "Redirect":
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Redirect":
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "Redirect":
        return replace(self, headers=(*self.headers, *headers.items()))


@dataclass(frozen=True, slots=True)
class PassThrough:
    """Continue to the wrapped handler.

    Headers attached here are forwarded by adapters that can merge them
    into the downstream response.
    """

    headers: tuple[tuple[str, str], ...] = ()

    def with_header(self, name: str, value: str) -> "PassThrough":
        return replace(self, headers=(*self.headers, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> "PassThrough":
        return replace(self, headers=(*self.headers, *headers.items()))


# Anything a rule, plugin, or the pipeline may answer with
type AnyResponse = Response | Redirect | PassThrough
