"""Shared fixtures for gatehouse tests."""

import pytest

from gatehouse.audit import set_security_event_sink


@pytest.fixture
def anyio_backend() -> str:
    return "asyncio"


@pytest.fixture(autouse=True)
def _reset_security_sink():
    yield
    set_security_event_sink(None)
