"""Setups: what a handler returns for the requests a matcher selects."""
from __future__ import annotations

import inspect
from typing import TYPE_CHECKING, Any, Awaitable, Callable, List, Optional, Tuple, Type, Union

import httpx

from .matchers import RequestMatcher, build_matcher
from .responses import Configure, json_response_factory, response_factory, split_response_args

if TYPE_CHECKING:
    from .handler import MockHandler

Responder = Callable[[httpx.Request], Awaitable[httpx.Response]]
Condition = Callable[[], bool]
RequestCallback = Callable[[httpx.Request], Any]


async def _call(func: Callable, request: httpx.Request) -> Any:
    result = func(request)
    if inspect.isawaitable(result):
        result = await result
    return result


def _constant(response: httpx.Response) -> Responder:
    async def respond(request: httpx.Request) -> httpx.Response:
        return response

    return respond


def _from_callable(func: Callable[[httpx.Request], Any]) -> Responder:
    async def respond(request: httpx.Request) -> httpx.Response:
        return await _call(func, request)

    return respond


def _raising(error: Union[BaseException, Type[BaseException]]) -> Responder:
    async def respond(request: httpx.Request) -> httpx.Response:
        if isinstance(error, BaseException):
            raise error
        if issubclass(error, httpx.RequestError):
            raise error(f"Mocked {error.__name__}", request=request)
        raise error()

    return respond


class Setup:
    """A matcher and the response it produces.

    The response-declaring methods return the setup so declarations chain
    the way they read: ``handler.setup_request(url).returns_response("ok")``.
    """

    def __init__(
        self,
        matcher: RequestMatcher,
        *,
        condition: Optional[Condition] = None,
        on_match: Optional[Callable[[], None]] = None,
    ):
        self.matcher = matcher
        self.condition = condition
        self.call_count = 0
        self._on_match = on_match
        self._callbacks: List[RequestCallback] = []
        self._responder: Optional[Responder] = None

    def is_active(self) -> bool:
        return self.condition is None or bool(self.condition())

    async def matches(self, request: httpx.Request) -> bool:
        return self.is_active() and await self.matcher.matches(request)

    async def invoke(self, request: httpx.Request) -> Optional[httpx.Response]:
        """Run callbacks and produce the response, or ``None`` if none is declared."""
        self.call_count += 1
        if self._on_match is not None:
            self._on_match()
        for callback in self._callbacks:
            await _call(callback, request)

        responder = self._next_responder()
        if responder is None:
            return None
        return await responder(request)

    def _next_responder(self) -> Optional[Responder]:
        return self._responder

    def _add_responder(self, responder: Responder) -> "Setup":
        self._responder = responder
        return self

    def returns(self, value: Union[httpx.Response, Callable[[httpx.Request], Any]]) -> "Setup":
        """Return ``value`` itself every time, or the result of calling it with the request."""
        if isinstance(value, httpx.Response):
            return self._add_responder(_constant(value))
        if callable(value):
            return self._add_responder(_from_callable(value))
        raise TypeError(f"expected an httpx.Response or a callable, got {type(value).__name__}")

    def returns_response(
        self,
        *args: Any,
        media_type: Optional[str] = None,
        encoding: Optional[str] = None,
        configure: Optional[Configure] = None,
    ) -> "Setup":
        """
        Return a new response for every request.

        Positional forms: ``(status)``, ``(content)``, ``(status, content)``,
        ``(content, media_type)`` and ``(status, content, media_type)``. The
        status defaults to 200 OK. See :func:`responses.create_response` for
        the supported content types.
        """
        status_code, content, positional_media_type = split_response_args(args)
        if positional_media_type is not None:
            if media_type is not None:
                raise TypeError("media_type given both positionally and by keyword")
            media_type = positional_media_type

        build = response_factory(
            status_code,
            content,
            media_type=media_type,
            encoding=encoding,
            configure=configure,
        )
        return self._add_responder(_from_callable(build))

    def returns_json(
        self,
        data: Any,
        status_code: int = 200,
        *,
        media_type: str = "application/json",
        configure: Optional[Configure] = None,
    ) -> "Setup":
        build = json_response_factory(data, status_code, media_type=media_type, configure=configure)
        return self._add_responder(_from_callable(build))

    def raises(self, error: Union[BaseException, Type[BaseException]]) -> "Setup":
        """Raise ``error`` instead of responding, e.g. ``httpx.ConnectError``."""
        if not isinstance(error, BaseException) and not (
            isinstance(error, type) and issubclass(error, BaseException)
        ):
            raise TypeError(f"expected an exception, got {error!r}")
        return self._add_responder(_raising(error))

    def callback(self, func: RequestCallback) -> "Setup":
        """Call ``func(request)`` each time this setup matches."""
        if not callable(func):
            raise TypeError(f"callback must be callable, got {type(func).__name__}")
        self._callbacks.append(func)
        return self

    def __repr__(self) -> str:
        return f"<{type(self).__name__} {self.matcher} calls={self.call_count}>"


class SequenceSetup(Setup):
    """A setup whose response declarations are returned one per call, in order."""

    def __init__(self, matcher: RequestMatcher, **kwargs: Any):
        super().__init__(matcher, **kwargs)
        self._steps: List[Responder] = []
        self._index = 0

    def _add_responder(self, responder: Responder) -> "SequenceSetup":
        self._steps.append(responder)
        return self

    def _next_responder(self) -> Optional[Responder]:
        if self._index >= len(self._steps):
            return None
        responder = self._steps[self._index]
        self._index += 1
        return responder

    @property
    def exhausted(self) -> bool:
        return self._index >= len(self._steps)


class MockSequence:
    """Orders setups registered through ``handler.in_sequence(sequence)``.

    Each setup only matches when it is the current step; matching advances
    to the next one. A cyclic sequence starts over after its last step.
    """

    def __init__(self, cyclic: bool = False):
        self.cyclic = cyclic
        self.step = 0
        self.length = 0

    def _add_step(self) -> int:
        position = self.length
        self.length += 1
        return position

    def _advance(self) -> None:
        self.step += 1
        if self.cyclic and self.length:
            self.step %= self.length


class ConditionalSetups:
    """Registers setups that only match while ``condition()`` is true."""

    def __init__(self, handler: "MockHandler", condition: Condition):
        if not callable(condition):
            raise TypeError(f"condition must be callable, got {type(condition).__name__}")
        self._handler = handler
        self._condition = condition

    def _guards(self) -> Tuple[Condition, Optional[Callable[[], None]]]:
        return self._condition, None

    def setup_any_request(self) -> Setup:
        return self.setup_request()

    def setup_request(self, *args: Any, **kwargs: Any) -> Setup:
        condition, on_match = self._guards()
        setup = Setup(build_matcher(*args, **kwargs), condition=condition, on_match=on_match)
        return self._handler.add_setup(setup)


class SequencedSetups(ConditionalSetups):
    """Registers setups as consecutive steps of a :class:`MockSequence`."""

    def __init__(self, handler: "MockHandler", sequence: MockSequence):
        if sequence is None:
            raise ValueError("sequence is required")
        self._handler = handler
        self._sequence = sequence

    def _guards(self) -> Tuple[Condition, Optional[Callable[[], None]]]:
        sequence = self._sequence
        position = sequence._add_step()
        return (lambda: sequence.step == position), sequence._advance
