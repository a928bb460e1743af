"""Builders for the responses returned by setups."""
from __future__ import annotations

import codecs
import json
from http import HTTPStatus
from typing import Any, Callable, Optional, Tuple, Union

import httpx

from .config import get_settings
from .streams import DeliveryByteStream, SharedStreamSource

Configure = Callable[[httpx.Response], None]
RawContent = Union[httpx.SyncByteStream, httpx.AsyncByteStream]
ResponseFactory = Callable[[httpx.Request], httpx.Response]

DEFAULT_TEXT_MEDIA_TYPE = "text/plain"
DEFAULT_ENCODING = "utf-8"


def _is_raw_content(content: object) -> bool:
    return isinstance(content, (httpx.SyncByteStream, httpx.AsyncByteStream))


def _is_stream(content: object) -> bool:
    return callable(getattr(content, "read", None))


def _encoding_name(encoding: Optional[str]) -> str:
    return (encoding or DEFAULT_ENCODING).lower()


def create_response(
    status_code: int = HTTPStatus.OK,
    content: Any = None,
    *,
    media_type: Optional[str] = None,
    encoding: Optional[str] = None,
    configure: Optional[Configure] = None,
    chunk_size: Optional[int] = None,
) -> httpx.Response:
    """
    Build a single response.

    Args:
        status_code: Response status
        content: ``None``, ``str``, bytes-like, a seekable binary stream, a
            :class:`SharedStreamSource`, or an httpx byte stream passed as-is
        media_type: Content type; text defaults to ``text/plain``
        encoding: Text encoding, defaults to UTF-8 (text content only)
        configure: Called with the response last, e.g. to set headers
        chunk_size: Read size for stream content

    Returns:
        A new ``httpx.Response``

    Raises:
        TypeError: For unsupported content
        NonSeekableStreamError: For a stream that cannot seek
    """
    headers = {}
    kwargs: dict[str, Any] = {}

    if content is None:
        if media_type is not None:
            headers["Content-Type"] = media_type
    elif isinstance(content, str):
        charset = _encoding_name(encoding)
        kwargs["content"] = content.encode(charset)
        headers["Content-Type"] = f"{media_type or DEFAULT_TEXT_MEDIA_TYPE}; charset={charset}"
    elif isinstance(content, (bytes, bytearray, memoryview)):
        kwargs["content"] = bytes(content)
        if media_type is not None:
            headers["Content-Type"] = media_type
    elif _is_raw_content(content):
        kwargs["stream"] = content
        if media_type is not None:
            headers["Content-Type"] = media_type
    elif isinstance(content, SharedStreamSource) or _is_stream(content):
        source = content if isinstance(content, SharedStreamSource) else SharedStreamSource(content)
        size = chunk_size or get_settings().STREAM_CHUNK_SIZE
        kwargs["stream"] = DeliveryByteStream(source.new_delivery(), chunk_size=size)
        if media_type is not None:
            headers["Content-Type"] = media_type
    else:
        raise TypeError(f"unsupported response content: {type(content).__name__}")

    response = httpx.Response(int(status_code), headers=headers, **kwargs)
    if configure is not None:
        configure(response)
    return response


def response_factory(
    status_code: int = HTTPStatus.OK,
    content: Any = None,
    *,
    media_type: Optional[str] = None,
    encoding: Optional[str] = None,
    configure: Optional[Configure] = None,
) -> ResponseFactory:
    """Validate arguments now and return a callable making a new response per request."""
    if isinstance(status_code, bool) or not isinstance(status_code, int):
        raise TypeError(f"status_code must be an int, got {type(status_code).__name__}")
    if isinstance(content, str) and encoding is not None:
        codecs.lookup(encoding)
    if isinstance(content, (bytearray, memoryview)):
        content = bytes(content)
    elif content is None or isinstance(content, (str, bytes, SharedStreamSource)) or _is_raw_content(content):
        pass
    elif _is_stream(content):
        # Wrap once so every response shares one origin
        content = SharedStreamSource(content)
    else:
        raise TypeError(f"unsupported response content: {type(content).__name__}")

    chunk_size = get_settings().STREAM_CHUNK_SIZE

    def build(request: httpx.Request) -> httpx.Response:
        return create_response(
            status_code,
            content,
            media_type=media_type,
            encoding=encoding,
            configure=configure,
            chunk_size=chunk_size,
        )

    return build


def json_response_factory(
    data: Any,
    status_code: int = HTTPStatus.OK,
    *,
    media_type: str = "application/json",
    configure: Optional[Configure] = None,
) -> ResponseFactory:
    """Serialize ``data`` once and return a factory for JSON responses."""
    body = json.dumps(data).encode(DEFAULT_ENCODING)
    return response_factory(status_code, body, media_type=media_type, configure=configure)


def split_response_args(args: Tuple[Any, ...]) -> Tuple[int, Any, Optional[str]]:
    """
    Split ``returns_response`` positional arguments.

    The status code is optional and defaults to 200 OK, so ``(content,)``,
    ``(status, content)`` and ``(status, content, media_type)`` are all
    accepted, as is ``(content, media_type)``.
    """
    values = list(args)
    status_code: int = HTTPStatus.OK
    if values and isinstance(values[0], int) and not isinstance(values[0], bool):
        status_code = values.pop(0)

    if len(values) > 2:
        raise TypeError(f"too many positional arguments: {args!r}")

    content = values[0] if values else None
    media_type = values[1] if len(values) > 1 else None
    return status_code, content, media_type
