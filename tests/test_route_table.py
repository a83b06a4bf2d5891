"""Tests for gatehouse.routing.table — registration and resolution."""

import pytest

from gatehouse.errors import ConfigurationError
from gatehouse.routing.route import MatchKind
from gatehouse.routing.table import RouteTable


def _rule(context):
    return None


class TestRegistration:
    def test_methods_chain(self) -> None:
        table = RouteTable()
        result = table.register_exact("/", _rule).register_prefix("/admin", _rule)
        assert result is table
        assert len(table) == 2

    def test_exact_definition(self) -> None:
        table = RouteTable().register_exact("/users/[id]", _rule)
        (route,) = table.routes
        assert route.kind is MatchKind.EXACT
        assert route.is_exact
        assert route.prefix is None
        assert route.priority == 30
        assert route.rules == (_rule,)

    def test_prefix_strips_trailing_slash(self) -> None:
        (route,) = RouteTable().register_prefix("/docs/", _rule).routes
        assert route.kind is MatchKind.PREFIX
        assert route.prefix == "/docs"

    def test_prefix_strips_trailing_wildcard(self) -> None:
        (route,) = RouteTable().register_prefix("/docs/*", _rule).routes
        assert route.prefix == "/docs"
        assert route.pattern == "/docs/*"

    def test_custom_defaults_to_exact(self) -> None:
        (route,) = RouteTable().register_custom("/a", rules=[_rule]).routes
        assert route.is_exact

    def test_custom_prefix_derives_prefix(self) -> None:
        (route,) = RouteTable().register_custom("/a/", rules=[_rule], is_exact=False).routes
        assert route.prefix == "/a"

    def test_custom_metadata_layers_over_defaults(self) -> None:
        table = RouteTable({"tier": "free", "region": "eu"})
        table.register_custom("/a", rules=[], metadata={"tier": "pro"})
        (route,) = table.routes
        assert dict(route.metadata) == {"tier": "pro", "region": "eu"}

    def test_metadata_is_read_only(self) -> None:
        (route,) = RouteTable().register_custom("/a", rules=[], metadata={"k": 1}).routes
        with pytest.raises(TypeError):
            route.metadata["k"] = 2  # type: ignore[index]

    def test_rejects_non_callable_rule(self) -> None:
        with pytest.raises(ConfigurationError, match="not callable"):
            RouteTable().register_exact("/a", "nope")  # type: ignore[arg-type]

    def test_rejects_inner_wildcard(self) -> None:
        with pytest.raises(ConfigurationError, match="final segment"):
            RouteTable().register_prefix("/a/*/b", _rule)


class TestResolve:
    def test_no_routes(self) -> None:
        assert RouteTable().resolve("/anything") is None

    def test_deeper_prefix_wins(self) -> None:
        table = RouteTable().register_prefix("/admin", _rule).register_prefix("/admin/users", _rule)
        route = table.resolve("/admin/users/5")
        assert route is not None
        assert route.pattern == "/admin/users"

    def test_deeper_prefix_wins_regardless_of_order(self) -> None:
        table = RouteTable().register_prefix("/admin/users", _rule).register_prefix("/admin", _rule)
        assert table.resolve("/admin/users/5").pattern == "/admin/users"  # type: ignore[union-attr]
        assert table.resolve("/admin/settings").pattern == "/admin"  # type: ignore[union-attr]

    def test_exact_beats_prefix(self) -> None:
        table = RouteTable().register_prefix("/admin", _rule).register_exact("/admin", _rule)
        route = table.resolve("/admin")
        assert route is not None
        assert route.is_exact

    def test_registration_order_breaks_ties(self) -> None:
        first, second = (lambda c: None), (lambda c: None)
        table = RouteTable().register_prefix("/a", first).register_prefix("/a/", second)
        assert table.resolve("/a/x").rules == (first,)  # type: ignore[union-attr]

    def test_deterministic(self) -> None:
        table = (
            RouteTable()
            .register_prefix("/", _rule)
            .register_prefix("/shop", _rule)
            .register_exact("/shop/cart", _rule)
        )
        results = {table.resolve("/shop/cart").pattern for _ in range(20)}  # type: ignore[union-attr]
        assert results == {"/shop/cart"}

    def test_resolve_does_not_reorder_registration(self) -> None:
        table = RouteTable().register_prefix("/a", _rule).register_exact("/a", _rule)
        table.resolve("/a")
        assert [r.is_exact for r in table._routes] == [False, True]

    def test_bracket_pattern_matches_literally(self) -> None:
        table = RouteTable().register_exact("/users/[id]", _rule)
        match = table.match("/users/[id]")
        assert match is not None
        assert match.params == {"id": "[id]"}

    def test_match_wildcard_param(self) -> None:
        match = RouteTable().register_prefix("/docs", _rule).match("/docs/a/b")
        assert match is not None
        assert match.params == {"*": "a/b"}

    def test_match_none(self) -> None:
        assert RouteTable().register_exact("/a", _rule).match("/b") is None

    def test_copy_is_independent(self) -> None:
        table = RouteTable().register_exact("/a", _rule)
        clone = table.copy()
        table.register_exact("/b", _rule)
        assert clone.resolve("/b") is None
        assert len(clone) == 1
