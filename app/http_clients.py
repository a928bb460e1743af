"""Named HTTP client registry.

Clients are configured once per name at startup and created fresh for each
use. Tests swap the transport of a single name without touching the rest of
its configuration.
"""
import logging
from dataclasses import dataclass, field
from typing import Callable, Dict, Optional

import httpx

logger = logging.getLogger(__name__)

DEFAULT_NAME = ""

TransportFactory = Callable[[], httpx.AsyncBaseTransport]


@dataclass
class ClientOptions:
    base_url: str = ""
    headers: Dict[str, str] = field(default_factory=dict)
    timeout: Optional[float] = None
    transport_factory: Optional[TransportFactory] = None


class HttpClientFactory:
    """Create ``httpx.AsyncClient`` instances from named configurations."""

    def __init__(self) -> None:
        self._options: Dict[str, ClientOptions] = {}

    def add_client(
        self,
        name: str = DEFAULT_NAME,
        *,
        base_url: str = "",
        headers: Optional[Dict[str, str]] = None,
        timeout: Optional[float] = None,
    ) -> ClientOptions:
        """Register or update the configuration for ``name``."""
        options = self._options.setdefault(name, ClientOptions())
        options.base_url = base_url
        options.headers.update(headers or {})
        options.timeout = timeout
        return options

    def configure_primary_transport(self, name: str, transport_factory: TransportFactory) -> None:
        """Use ``transport_factory()`` as the transport for clients named ``name``."""
        options = self._options.setdefault(name, ClientOptions())
        options.transport_factory = transport_factory
        logger.debug({"event": "http_clients.transport_replaced", "name": name})

    def create_client(self, name: str = DEFAULT_NAME) -> httpx.AsyncClient:
        """Create a new client; unknown names get a client with default settings."""
        options = self._options.get(name, ClientOptions())
        kwargs = {"base_url": options.base_url, "headers": options.headers}
        if options.timeout is not None:
            kwargs["timeout"] = options.timeout
        if options.transport_factory is not None:
            kwargs["transport"] = options.transport_factory()
        return httpx.AsyncClient(**kwargs)
