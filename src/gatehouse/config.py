"""Builder configuration.

GatekeeperConfig is a frozen dataclass — immutable after creation,
IDE-autocompletable, no string-key dict lookups.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any

from gatehouse._internal.types import UserFetcher
from gatehouse.plugins.protocol import Plugin


@dataclass(frozen=True, slots=True)
class GatekeeperConfig:
    """Configuration for :class:`~gatehouse.builder.PolicyBuilder`.

    Attributes:
        fetch_user: Sync or async callable loading user data for a
            request. A falsy result means unauthenticated.
        auth_paths: Paths that pass through when the pipeline fails
            instead of redirecting to sign-in. Entries ending in ``/*``
            cover every path starting with the stem. The path of
            ``sign_in_url`` is always included.
        plugins: Plugins installed before any added with ``use()``.
        default_metadata: Seed metadata for every request context and
            every registered route.
        sign_in_url: Redirect target of the default error policy,
            resolved against the request URL.
    """

    fetch_user: UserFetcher | None = None
    auth_paths: tuple[str, ...] = ()
    plugins: tuple[Plugin, ...] = ()
    default_metadata: Mapping[str, Any] = field(default_factory=lambda: MappingProxyType({}))
    sign_in_url: str = "/sign-in"
