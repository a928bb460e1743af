"""Reuse of one seekable byte stream across many mocked responses.

A :class:`SharedStreamSource` wraps a stream handed to ``returns_response``.
Each response gets its own :class:`ResponseStream` view that keeps a private
cursor, so reading one response never moves another response's read window,
and closing a response never closes the stream the test owns.

Reads swap the shared stream's position in and out under a lock that belongs
to the underlying stream object, so several sources wrapping the same stream
(for example two setups returning the same ``BytesIO``) serialize their reads.
Access is expected to be serialized; the lock protects the position
bookkeeping, not throughput.
"""
from __future__ import annotations

import io
import logging
import threading
import weakref
from typing import AsyncIterator, BinaryIO, Iterator, Optional

import httpx

from .errors import NonSeekableStreamError, UnreadableStreamError

logger = logging.getLogger(__name__)

_stream_locks: "weakref.WeakKeyDictionary[object, threading.Lock]" = weakref.WeakKeyDictionary()
_stream_locks_guard = threading.Lock()


def _lock_for(stream: object) -> threading.Lock:
    """Return the lock shared by every source wrapping ``stream``."""
    with _stream_locks_guard:
        try:
            lock = _stream_locks.get(stream)
            if lock is None:
                lock = _stream_locks[stream] = threading.Lock()
            return lock
        except TypeError:
            # Not weak-referenceable; sources over this object get their own lock
            logger.debug({"event": "mockhandler.stream.private_lock", "type": type(stream).__name__})
            return threading.Lock()


def _is_seekable(stream: object) -> bool:
    seekable = getattr(stream, "seekable", None)
    return callable(seekable) and bool(seekable())


def _is_readable(stream: object) -> bool:
    readable = getattr(stream, "readable", None)
    return not callable(readable) or bool(readable())


class SharedStreamSource:
    """Produces independent read views over one seekable stream.

    The origin position is captured from the stream the first time a view is
    requested, not when the source is created. Every view starts reading at
    the origin, and the stream is seeked back to the origin whenever a view is
    closed or a new one is requested.
    """

    def __init__(self, stream: BinaryIO):
        if stream is None:
            raise ValueError("stream is required")
        if isinstance(stream, io.TextIOBase):
            raise UnreadableStreamError(stream, "is a text stream")
        if not _is_readable(stream):
            raise UnreadableStreamError(stream, "is not readable")
        if not _is_seekable(stream):
            raise NonSeekableStreamError(stream)

        self.stream = stream
        self.lock = _lock_for(stream)
        self._origin: Optional[int] = None

    @property
    def origin(self) -> Optional[int]:
        """Origin position, or ``None`` until the first delivery."""
        return self._origin

    def new_delivery(self) -> "ResponseStream":
        """Return a fresh read view positioned at the origin."""
        with self.lock:
            if self._origin is None:
                self._origin = self.stream.tell()
            else:
                self.stream.seek(self._origin)
            return ResponseStream(self, self._origin)

    def reset(self) -> None:
        """Seek the shared stream back to the origin, if one was captured."""
        if self._origin is None:
            return
        with self.lock:
            self.stream.seek(self._origin)


class ResponseStream(io.RawIOBase):
    """Forward-only view over a shared stream with its own cursor.

    Like the body stream of a real HTTP response, it can be read but not
    seeked, written or measured.
    """

    def __init__(self, source: SharedStreamSource, position: int):
        super().__init__()
        self._source = source
        self._position = position

    def readable(self) -> bool:
        readable = getattr(self._source.stream, "readable", None)
        return readable() if callable(readable) else True

    def seekable(self) -> bool:
        return False

    def writable(self) -> bool:
        return False

    def readinto(self, buffer) -> Optional[int]:
        if self.closed:
            raise ValueError("I/O operation on closed response stream")

        view = memoryview(buffer).cast("B")
        inner = self._source.stream
        with self._source.lock:
            original_position = inner.tell()
            inner.seek(self._position)
            try:
                data = inner.read(len(view))
                if data is not None:
                    self._position = inner.tell()
            finally:
                inner.seek(original_position)

        if data is None:
            return None
        count = len(data)
        view[:count] = data
        return count

    def _unsupported(self, operation: str):
        raise io.UnsupportedOperation(f"{operation} is not supported on a response stream")

    def seek(self, offset: int, whence: int = io.SEEK_SET) -> int:
        self._unsupported("seek")

    def tell(self) -> int:
        self._unsupported("tell")

    def truncate(self, size: Optional[int] = None) -> int:
        self._unsupported("truncate")

    def write(self, data) -> int:
        self._unsupported("write")

    def fileno(self) -> int:
        self._unsupported("fileno")

    def close(self) -> None:
        # The shared stream stays open; only its position is restored, once.
        if not self.closed and not getattr(self._source.stream, "closed", False):
            self._source.reset()
        super().close()

    def __del__(self) -> None:
        # Garbage collection leaves the shared stream where it is
        if not self.closed:
            super().close()


class DeliveryByteStream(httpx.SyncByteStream, httpx.AsyncByteStream):
    """Serves a response body from a :class:`ResponseStream` to sync or async clients.

    Async iteration reads the shared stream synchronously, which blocks the
    event loop for file-backed streams. In-memory test data is the intended use.
    """

    def __init__(self, view: ResponseStream, chunk_size: int = 64 * 1024):
        self._view = view
        self._chunk_size = chunk_size

    def __iter__(self) -> Iterator[bytes]:
        while True:
            chunk = self._view.read(self._chunk_size)
            if not chunk:
                break
            yield chunk

    async def __aiter__(self) -> AsyncIterator[bytes]:
        for chunk in self:
            yield chunk

    def close(self) -> None:
        self._view.close()

    async def aclose(self) -> None:
        self._view.close()
