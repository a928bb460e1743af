"""The transport double: setups, dispatch, verification and client construction."""
from __future__ import annotations

import asyncio
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Coroutine, List, Optional, TypeVar, Union
from unittest import mock

import httpx

from .config import Behavior, get_settings
from .errors import UnmatchedRequestError, VerificationError
from .factory import MockClientFactory
from .matchers import RequestMatcher, build_matcher
from .setups import ConditionalSetups, Condition, MockSequence, SequencedSetups, SequenceSetup, Setup
from .times import Times

logger = logging.getLogger(__name__)

T = TypeVar("T")


def run_sync(coroutine: Coroutine[Any, Any, T]) -> T:
    """Run ``coroutine`` to completion from synchronous code."""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        return asyncio.run(coroutine)

    # A loop is already running in this thread; use a private one elsewhere
    with ThreadPoolExecutor(max_workers=1, thread_name_prefix="mockhandler") as executor:
        return executor.submit(asyncio.run, coroutine).result()


class MockHandler(httpx.BaseTransport, httpx.AsyncBaseTransport):
    """Mock transport for ``httpx.Client`` and ``httpx.AsyncClient``.

    Every request is recorded by :attr:`send`, a ``unittest.mock.AsyncMock``,
    and answered by the most recently registered setup that matches it.
    Unmatched requests raise :class:`UnmatchedRequestError` in strict mode or
    get an empty response with ``loose_status_code`` in loose mode.

    Example:
        handler = MockHandler(Behavior.STRICT)
        handler.setup_request("GET", "https://api.example.com/items").returns_json([])
        with handler.create_client() as client:
            client.get("https://api.example.com/items")
        handler.verify_request("GET", "https://api.example.com/items", times=Times.once())
    """

    def __init__(
        self,
        behavior: Optional[Union[Behavior, str]] = None,
        *,
        loose_status_code: Optional[int] = None,
    ):
        settings = get_settings()
        self.behavior = Behavior(behavior) if behavior is not None else settings.BEHAVIOR
        self.loose_status_code = (
            loose_status_code if loose_status_code is not None else settings.LOOSE_STATUS_CODE
        )
        self.setups: List[Setup] = []
        self.send = mock.AsyncMock(name="send", side_effect=self._dispatch)

    # Transport interface

    def handle_request(self, request: httpx.Request) -> httpx.Response:
        request.read()
        return run_sync(self.send(request))

    async def handle_async_request(self, request: httpx.Request) -> httpx.Response:
        await request.aread()
        return await self.send(request)

    async def _dispatch(self, request: httpx.Request) -> httpx.Response:
        for setup in reversed(self.setups):
            if not await setup.matches(request):
                continue

            logger.debug(
                {"event": "mockhandler.request.matched", "method": request.method, "url": str(request.url)}
            )
            response = await setup.invoke(request)
            if response is None:
                reason = "sequence exhausted" if isinstance(setup, SequenceSetup) else "setup has no response"
                return self._unmatched(request, reason)
            return response

        return self._unmatched(request, "no setup matched")

    def _unmatched(self, request: httpx.Request, reason: str) -> httpx.Response:
        if self.behavior is Behavior.STRICT:
            logger.info(
                {"event": "mockhandler.request.rejected", "method": request.method, "url": str(request.url), "reason": reason}
            )
            raise UnmatchedRequestError(request, reason)

        logger.debug(
            {"event": "mockhandler.request.default", "method": request.method, "url": str(request.url), "reason": reason}
        )
        return httpx.Response(self.loose_status_code)

    # Clients

    def create_client(self, **kwargs: Any) -> httpx.Client:
        """Create a new ``httpx.Client`` backed by this handler."""
        return httpx.Client(transport=self, **kwargs)

    def create_async_client(self, **kwargs: Any) -> httpx.AsyncClient:
        """Create a new ``httpx.AsyncClient`` backed by this handler."""
        return httpx.AsyncClient(transport=self, **kwargs)

    def create_client_factory(self, asynchronous: bool = False, **kwargs: Any) -> MockClientFactory:
        """Create a factory returning new clients backed by this handler."""
        return MockClientFactory(self, asynchronous=asynchronous, **kwargs)

    # Setups

    def add_setup(self, setup: Setup) -> Setup:
        self.setups.append(setup)
        logger.debug({"event": "mockhandler.setup.added", "setup": repr(setup)})
        return setup

    def setup_any_request(self) -> Setup:
        """Specify a setup matching any request."""
        return self.add_setup(Setup(RequestMatcher.any()))

    def setup_request(self, *args: Any, **kwargs: Any) -> Setup:
        """
        Specify a setup for requests matching a method, URL and/or predicate.

        Args:
            *args: ``url``, ``match``, ``(url, match)``, ``(method, url)``,
                ``(method, match)`` or ``(method, url, match)``
            **kwargs: ``method``, ``url`` and ``match`` by keyword

        Returns:
            The setup, to declare a response on
        """
        return self.add_setup(Setup(build_matcher(*args, **kwargs)))

    def setup_any_request_sequence(self) -> SequenceSetup:
        """Specify a setup matching any request, returning its responses in order."""
        return self.add_setup(SequenceSetup(RequestMatcher.any()))

    def setup_request_sequence(self, *args: Any, **kwargs: Any) -> SequenceSetup:
        """Like :meth:`setup_request`, returning one declared response per call."""
        return self.add_setup(SequenceSetup(build_matcher(*args, **kwargs)))

    def when(self, condition: Condition) -> ConditionalSetups:
        """Register setups that only match while ``condition()`` is true."""
        return ConditionalSetups(self, condition)

    def in_sequence(self, sequence: MockSequence) -> SequencedSetups:
        """Register setups that must match in the order they are declared."""
        return SequencedSetups(self, sequence)

    # Verification

    @property
    def requests(self) -> List[httpx.Request]:
        """Requests received so far, in order."""
        return [call.args[0] for call in self.send.call_args_list]

    def _count(self, matcher: RequestMatcher) -> int:
        async def count() -> int:
            total = 0
            for request in self.requests:
                if await matcher.matches(request):
                    total += 1
            return total

        return run_sync(count())

    def _verify(self, matcher: RequestMatcher, times: Optional[Times], fail_message: Optional[str]) -> None:
        times = times or Times.at_least_once()
        actual = self._count(matcher)
        if not times.matches(actual):
            raise VerificationError(
                f"Expected {matcher} {times}, but it was performed "
                f"{actual} time{'' if actual == 1 else 's'}.",
                expected=times,
                actual=actual,
                fail_message=fail_message,
            )

    def verify_any_request(self, times: Optional[Times] = None, fail_message: Optional[str] = None) -> None:
        """
        Verify the number of requests received.

        Args:
            times: Expected count, defaults to at least once
            fail_message: Prepended to the error message on failure

        Raises:
            VerificationError: If the count does not match
        """
        self._verify(RequestMatcher.any(), times, fail_message)

    def verify_request(
        self,
        *args: Any,
        times: Optional[Times] = None,
        fail_message: Optional[str] = None,
        **kwargs: Any,
    ) -> None:
        """Verify requests matching the same shapes accepted by :meth:`setup_request`."""
        self._verify(build_matcher(*args, **kwargs), times, fail_message)

    def verify_all(self) -> None:
        """Verify that every setup matched at least one request."""
        unused = [setup for setup in self.setups if setup.call_count == 0]
        if unused:
            details = "\n".join(f"  {setup!r}" for setup in unused)
            raise VerificationError(f"Expected every setup to match a request; never matched:\n{details}")

    def reset(self) -> None:
        """Forget all setups and recorded requests."""
        self.setups.clear()
        self.send.reset_mock()
