import asyncio
import inspect

import pytest

from httpx_mockhandler import Behavior, MockHandler


def pytest_pyfunc_call(pyfuncitem):
    if asyncio.iscoroutinefunction(pyfuncitem.obj):
        loop = asyncio.new_event_loop()
        asyncio.set_event_loop(loop)
        try:
            sig = inspect.signature(pyfuncitem.obj)
            accepted = {name: value for name, value in pyfuncitem.funcargs.items() if name in sig.parameters}
            loop.run_until_complete(pyfuncitem.obj(**accepted))
        finally:
            loop.close()
            asyncio.set_event_loop(None)
        return True
    return None


@pytest.fixture
def handler() -> MockHandler:
    return MockHandler(Behavior.STRICT)


@pytest.fixture
def loose_handler() -> MockHandler:
    return MockHandler(Behavior.LOOSE)


@pytest.fixture
def client(handler):
    with handler.create_client() as client:
        yield client
