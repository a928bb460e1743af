"""Client factory handing out clients backed by one mock handler."""
from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, Callable, Dict, Union
from unittest import mock

import httpx

if TYPE_CHECKING:
    from .handler import MockHandler

logger = logging.getLogger(__name__)

DEFAULT_NAME = ""

Client = Union[httpx.Client, httpx.AsyncClient]


class MockClientFactory:
    """Creates a new client per call, all sharing the same handler.

    ``create_client`` is a ``unittest.mock.Mock`` so calls to it can be
    asserted like any other mock. Use :meth:`setup_client` to give one name
    its own client configuration, e.g. a base URL.
    """

    def __init__(self, handler: "MockHandler", *, asynchronous: bool = False, **client_kwargs: Any):
        if handler is None:
            raise ValueError("handler is required")
        self.handler = handler
        self.asynchronous = asynchronous
        self._client_kwargs = client_kwargs
        self._builders: Dict[str, Callable[[], Client]] = {}
        self.create_client = mock.Mock(name="create_client", side_effect=self._create_client)

    def _create_client(self, name: str = DEFAULT_NAME) -> Client:
        builder = self._builders.get(name)
        if builder is not None:
            return builder()
        return self.new_client()

    def new_client(self, **kwargs: Any) -> Client:
        """Create a default client; ``kwargs`` override the factory's client options."""
        options = {**self._client_kwargs, **kwargs}
        if self.asynchronous:
            return self.handler.create_async_client(**options)
        return self.handler.create_client(**options)

    def setup_client(self, name: str, builder: Callable[[], Client]) -> None:
        """Return ``builder()`` for clients requested as ``name``."""
        if not callable(builder):
            raise TypeError(f"builder must be callable, got {type(builder).__name__}")
        self._builders[name] = builder
        logger.debug({"event": "mockhandler.factory.named_client", "name": name})
