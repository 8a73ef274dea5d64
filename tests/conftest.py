"""Shared test fixtures for all cancelon tests."""

import pytest

from cancelon import Dispatcher, EmitterSettings


@pytest.fixture
def dispatcher() -> Dispatcher:
    """Dispatcher with default settings (warning handler installed)."""
    return Dispatcher()


@pytest.fixture
def quiet_dispatcher() -> Dispatcher:
    """Dispatcher without the default maxListenersPassed handler."""
    return Dispatcher(EmitterSettings(warn_on_max_listeners=False))


@pytest.fixture
def calls() -> list:
    """Shared call log for listeners."""
    return []


@pytest.fixture
def recorder(calls):
    """Factory for listeners that append a tag to ``calls``."""

    def make(tag, result=None):
        def listener(*args, **kwargs):
            calls.append(tag)
            return result

        listener.__qualname__ = f"recorder[{tag}]"
        return listener

    return make


@pytest.fixture
def async_recorder(calls):
    """Factory for async listeners that append a tag to ``calls``."""

    def make(tag, result=None):
        async def listener(*args, **kwargs):
            calls.append(tag)
            return result

        listener.__qualname__ = f"async_recorder[{tag}]"
        return listener

    return make
