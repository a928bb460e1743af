"""Exception types raised by the mock handler."""
from __future__ import annotations

from typing import Optional, TYPE_CHECKING

import httpx

if TYPE_CHECKING:
    from .times import Times


class MockHandlerError(Exception):
    """Base exception for mock handler errors."""


class NonSeekableStreamError(MockHandlerError, ValueError):
    """A stream that cannot seek was given where it must back several responses."""

    def __init__(self, stream: object):
        self.stream = stream
        super().__init__(
            f"{type(stream).__name__} is not seekable; shared response streams "
            "require seek support. Copy it into io.BytesIO or bytes first."
        )


class UnreadableStreamError(MockHandlerError, ValueError):
    """A stream that cannot be read as bytes was given as response content."""

    def __init__(self, stream: object, reason: str):
        self.stream = stream
        super().__init__(f"{type(stream).__name__} {reason}; response streams must be readable binary streams.")


class UnmatchedRequestError(MockHandlerError):
    """A request reached a strict handler without a matching setup."""

    def __init__(self, request: httpx.Request, reason: str = "no setup matched"):
        self.request = request
        self.reason = reason
        super().__init__(
            f"{request.method} {request.url}: {reason}. "
            "Strict handlers require a setup for every request."
        )


class VerificationError(MockHandlerError, AssertionError):
    """Recorded requests did not satisfy an expectation."""

    def __init__(
        self,
        message: str,
        *,
        expected: Optional["Times"] = None,
        actual: Optional[int] = None,
        fail_message: Optional[str] = None,
    ):
        self.expected = expected
        self.actual = actual
        self.fail_message = fail_message
        if fail_message:
            message = f"{fail_message}\n{message}"
        super().__init__(message)
