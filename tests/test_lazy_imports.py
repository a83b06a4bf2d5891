"""Tests for gatehouse.__init__ lazy imports."""

import pytest

import gatehouse


@pytest.mark.parametrize("name", gatehouse.__all__)
def test_all_names_resolve(name: str) -> None:
    assert getattr(gatehouse, name) is not None, f"gatehouse.{name} resolved to None"


def test_unknown_name_raises_attribute_error() -> None:
    with pytest.raises(AttributeError, match="no attribute"):
        gatehouse.__getattr__("ThisDoesNotExist")


def test_top_level_builder_is_the_real_class() -> None:
    from gatehouse.builder import PolicyBuilder

    assert gatehouse.PolicyBuilder is PolicyBuilder
