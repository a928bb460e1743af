"""Mock transport helpers for testing code that uses httpx."""
from .config import Behavior, Settings, get_settings
from .errors import (
    MockHandlerError,
    NonSeekableStreamError,
    UnmatchedRequestError,
    UnreadableStreamError,
    VerificationError,
)
from .factory import MockClientFactory
from .handler import MockHandler
from .matchers import RequestMatcher, RequestPredicate
from .responses import create_response, json_response_factory, response_factory
from .setups import MockSequence, SequenceSetup, Setup
from .streams import DeliveryByteStream, ResponseStream, SharedStreamSource
from .times import Times

__version__ = "0.1.0"

__all__ = [
    "Behavior",
    "DeliveryByteStream",
    "MockClientFactory",
    "MockHandler",
    "MockHandlerError",
    "MockSequence",
    "NonSeekableStreamError",
    "RequestMatcher",
    "RequestPredicate",
    "ResponseStream",
    "SequenceSetup",
    "Settings",
    "Setup",
    "SharedStreamSource",
    "Times",
    "UnmatchedRequestError",
    "UnreadableStreamError",
    "VerificationError",
    "create_response",
    "get_settings",
    "json_response_factory",
    "response_factory",
]
