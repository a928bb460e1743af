"""Request predicates used by setups and verification."""
from __future__ import annotations

import inspect
import re
import weakref
from http import HTTPMethod
from typing import Awaitable, Callable, Optional, Union

import httpx

RequestMatch = Callable[[httpx.Request], Union[bool, Awaitable[bool]]]
Method = Union[str, HTTPMethod]
URLTypes = Union[str, httpx.URL]

_METHOD_TOKEN = re.compile(r"^[A-Za-z]+$")


def normalize_method(method: Method) -> str:
    value = getattr(method, "value", method)
    if not isinstance(value, str) or not _METHOD_TOKEN.match(value):
        raise ValueError(f"invalid HTTP method: {method!r}")
    return value.upper()


def _looks_like_method(value: object) -> bool:
    if isinstance(value, HTTPMethod):
        return True
    return isinstance(value, str) and bool(_METHOD_TOKEN.match(value))


class RequestPredicate:
    """Sync or async request predicate whose result is memoized per request.

    A predicate that reads a single-use request body would fail if it ran
    twice for the same request, so the first result is kept for as long as
    the request object is alive.
    """

    def __init__(self, match: RequestMatch):
        if match is None:
            raise ValueError("match is required")
        if not callable(match):
            raise TypeError(f"match must be callable, got {type(match).__name__}")
        self.match = match
        self._results: "weakref.WeakKeyDictionary[httpx.Request, bool]" = weakref.WeakKeyDictionary()

    async def matches(self, request: httpx.Request) -> bool:
        try:
            return self._results[request]
        except KeyError:
            pass

        result = self.match(request)
        if inspect.isawaitable(result):
            result = await result
        result = bool(result)
        self._results[request] = result
        return result

    def __repr__(self) -> str:
        name = getattr(self.match, "__qualname__", None) or repr(self.match)
        return f"<predicate {name}>"


class RequestMatcher:
    """Matches a request by method, exact URL and predicate, all optional."""

    def __init__(
        self,
        method: Optional[Method] = None,
        url: Optional[URLTypes] = None,
        match: Optional[Union[RequestMatch, RequestPredicate]] = None,
    ):
        self.method = normalize_method(method) if method is not None else None
        self.url = httpx.URL(url) if url is not None else None
        if match is None or isinstance(match, RequestPredicate):
            self.predicate = match
        else:
            self.predicate = RequestPredicate(match)

    @classmethod
    def any(cls) -> "RequestMatcher":
        return cls()

    async def matches(self, request: httpx.Request) -> bool:
        if self.method is not None and request.method != self.method:
            return False
        if self.url is not None and request.url != self.url:
            return False
        if self.predicate is not None:
            return await self.predicate.matches(request)
        return True

    def __str__(self) -> str:
        parts = [self.method or "any method", str(self.url) if self.url is not None else "any URL"]
        if self.predicate is not None:
            parts.append(f"matching {self.predicate!r}")
        return "request " + " ".join(parts)

    def __repr__(self) -> str:
        return f"RequestMatcher({self})"


def build_matcher(
    *args,
    method: Optional[Method] = None,
    url: Optional[URLTypes] = None,
    match: Optional[Union[RequestMatch, RequestPredicate]] = None,
) -> RequestMatcher:
    """
    Build a matcher from the positional shapes accepted by the setup helpers.

    Accepted shapes: ``()``, ``(url)``, ``(match)``, ``(url, match)``,
    ``(method, url)``, ``(method, match)`` and ``(method, url, match)``.
    Keyword arguments may be used instead of, but not together with, the
    positional form of the same field.

    Raises:
        TypeError: For an argument shape that is not recognized
        ValueError: For an invalid method or URL
    """
    values = list(args)
    last = values[-1] if values else None
    if isinstance(last, RequestPredicate) or (callable(last) and not isinstance(last, (str, httpx.URL))):
        if match is not None:
            raise TypeError("match given both positionally and by keyword")
        match = values.pop()

    if len(values) > 2:
        raise TypeError(f"too many positional arguments: {args!r}")

    if len(values) == 2:
        positional_method, positional_url = values
    elif len(values) == 1:
        # A lone token is a method only when a URL is not otherwise expected
        only = values[0]
        if match is not None and url is None and _looks_like_method(only):
            positional_method, positional_url = only, None
        else:
            positional_method, positional_url = None, only
    else:
        positional_method = positional_url = None

    if positional_method is not None:
        if method is not None:
            raise TypeError("method given both positionally and by keyword")
        method = positional_method
    if positional_url is not None:
        if url is not None:
            raise TypeError("url given both positionally and by keyword")
        url = positional_url

    return RequestMatcher(method=method, url=url, match=match)
