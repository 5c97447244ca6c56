"""Pytest configuration and shared fixtures."""
import asyncio

import pytest

from eventdriver.config import EventBusConfig
from eventdriver.context.provider import EventProvider
from eventdriver.events.bus import EventBus


@pytest.fixture
def bus():
    return EventBus()


@pytest.fixture
def provider(bus):
    return EventProvider(bus, EventBusConfig())


@pytest.fixture
def run():
    """Run a coroutine on a fresh event loop."""

    def _run(coro):
        return asyncio.run(coro)

    return _run
