"""Gatehouse exception hierarchy.

Shared across the route table, builder, and legacy matcher so every
module raises and catches the same types.
"""


class GatehouseError(Exception):
    """Base for all gatehouse-specific errors."""


class ConfigurationError(GatehouseError):
    """Raised when a builder, plugin, or rule is configured incorrectly.

    Raised eagerly at registration time, never while serving.
    """


class MissingUserData(GatehouseError):  # noqa: N818
    """The user fetcher returned nothing for a request that needs it.

    Funnels into the same error handling as a fetcher that raised.
    """

    def __init__(self, path: str) -> None:
        super().__init__(f"No user data for {path!r}")
        self.path = path
