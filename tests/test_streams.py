"""Tests for sharing one seekable stream between many response bodies."""
import gc
import io
import tempfile

import pytest

from httpx_mockhandler import NonSeekableStreamError, ResponseStream, SharedStreamSource, UnreadableStreamError


class NonSeekableStream(io.RawIOBase):
    def readable(self):
        return True

    def seekable(self):
        return False


class FailingStream(io.BytesIO):
    def read(self, size=-1):
        raise OSError("disk went away")


def test_every_delivery_reads_whole_stream():
    """
    Scenario: One 10-byte stream backs three responses
    Given a shared source over a 10-byte stream at position 0
    When three deliveries are each read to the end
    Then each one sees all ten bytes and the stream ends back at 0
    """
    data = bytes(range(10))
    stream = io.BytesIO(data)
    source = SharedStreamSource(stream)

    for _ in range(3):
        with source.new_delivery() as view:
            assert view.read() == data
        assert stream.tell() == 0


def test_deliveries_start_at_origin():
    stream = io.BytesIO(b"skip-body")
    stream.seek(5)
    source = SharedStreamSource(stream)

    first = source.new_delivery()
    second = source.new_delivery()

    assert source.origin == 5
    assert first.read() == b"body"
    assert second.read() == b"body"
    assert stream.tell() == 5


def test_origin_is_captured_on_first_delivery():
    stream = io.BytesIO(b"0123456789")
    source = SharedStreamSource(stream)
    assert source.origin is None

    stream.seek(3)
    view = source.new_delivery()
    stream.seek(8)
    later = source.new_delivery()

    assert source.origin == 3
    assert view.read() == b"3456789"
    assert later.read() == b"3456789"


def test_interleaved_views_keep_their_own_cursor():
    stream = io.BytesIO(b"abcdefghij")
    source = SharedStreamSource(stream)
    first = source.new_delivery()
    second = source.new_delivery()

    assert first.read(3) == b"abc"
    assert second.read(5) == b"abcde"
    assert first.read(3) == b"def"
    assert second.read() == b"fghij"
    assert first.read() == b"ghij"
    assert stream.tell() == 0


def test_sources_over_same_stream_share_a_lock():
    stream = io.BytesIO(b"shared bytes")
    one = SharedStreamSource(stream)
    two = SharedStreamSource(stream)

    assert one.lock is two.lock
    assert one.new_delivery().read(6) == b"shared"
    assert two.new_delivery().read() == b"shared bytes"
    assert stream.tell() == 0


def test_two_sources_over_one_stream_keep_its_origin():
    """
    Scenario: Two wrappers share one stream positioned mid-way
    Given one stream seeked to 5 and two sources wrapping it
    When each source delivers and closes a response twice
    Then every delivery reads from byte 5 and the stream is back at 5 after each close
    """
    stream = io.BytesIO(bytes(range(11)))
    stream.seek(5)
    sources = [SharedStreamSource(stream), SharedStreamSource(stream)]

    for _ in range(2):
        for source in sources:
            with source.new_delivery() as view:
                assert view.read() == bytes(range(5, 11))
            assert stream.tell() == 5

    assert [source.origin for source in sources] == [5, 5]


def test_read_restores_position_moved_by_owner():
    stream = io.BytesIO(b"0123456789")
    view = SharedStreamSource(stream).new_delivery()
    stream.seek(7)

    assert view.read(2) == b"01"
    assert stream.tell() == 7


def test_zero_byte_read():
    stream = io.BytesIO(b"abc")
    view = SharedStreamSource(stream).new_delivery()
    stream.seek(2)

    assert view.read(0) == b""
    assert stream.tell() == 2
    assert view.read() == b"abc"


def test_reading_past_end_returns_empty():
    view = SharedStreamSource(io.BytesIO(b"ab")).new_delivery()

    assert view.read(10) == b"ab"
    assert view.read(10) == b""


def test_non_seekable_stream_is_rejected():
    with pytest.raises(NonSeekableStreamError) as exc_info:
        SharedStreamSource(NonSeekableStream())

    assert isinstance(exc_info.value, ValueError)
    assert "NonSeekableStream" in str(exc_info.value)


def test_text_stream_is_rejected():
    with pytest.raises(UnreadableStreamError, match="text stream") as exc_info:
        SharedStreamSource(io.StringIO("hello"))

    assert isinstance(exc_info.value, ValueError)


def test_write_only_stream_is_rejected():
    with tempfile.TemporaryFile("wb") as stream:
        with pytest.raises(UnreadableStreamError, match="not readable"):
            SharedStreamSource(stream)


def test_missing_stream_is_rejected():
    with pytest.raises(ValueError):
        SharedStreamSource(None)


@pytest.mark.parametrize(
    "operation",
    [
        lambda view: view.seek(0),
        lambda view: view.tell(),
        lambda view: view.truncate(),
        lambda view: view.write(b"x"),
        lambda view: view.fileno(),
    ],
)
def test_view_rejects_unsupported_operations(operation):
    view = SharedStreamSource(io.BytesIO(b"data")).new_delivery()
    view.read(2)

    with pytest.raises(io.UnsupportedOperation):
        operation(view)


def test_view_capabilities():
    view = SharedStreamSource(io.BytesIO(b"data")).new_delivery()

    assert isinstance(view, ResponseStream)
    assert view.readable()
    assert not view.seekable()
    assert not view.writable()


def test_close_keeps_shared_stream_open():
    stream = io.BytesIO(b"payload")
    source = SharedStreamSource(stream)
    view = source.new_delivery()
    view.read(3)

    view.close()

    assert view.closed
    assert not stream.closed
    assert stream.tell() == 0
    with pytest.raises(ValueError):
        view.read()


def test_closing_unread_view_resets_to_origin():
    stream = io.BytesIO(b"0123456789")
    stream.seek(4)
    source = SharedStreamSource(stream)
    view = source.new_delivery()
    stream.seek(9)

    view.close()

    assert stream.tell() == 4


def test_close_resets_only_once():
    stream = io.BytesIO(b"0123456789")
    source = SharedStreamSource(stream)
    view = source.new_delivery()
    view.close()
    stream.seek(6)

    view.close()

    assert stream.tell() == 6


def test_collected_view_leaves_position_alone():
    stream = io.BytesIO(b"0123456789")
    view = SharedStreamSource(stream).new_delivery()
    view.read(2)
    stream.seek(6)

    del view
    gc.collect()

    assert stream.tell() == 6


def test_underlying_errors_propagate_and_position_is_restored():
    stream = FailingStream(b"0123456789")
    stream.seek(2)
    view = SharedStreamSource(stream).new_delivery()
    stream.seek(5)

    with pytest.raises(OSError, match="disk went away"):
        view.read(4)
    assert stream.tell() == 5


def test_view_iterates_lines():
    view = SharedStreamSource(io.BytesIO(b"one\ntwo\n")).new_delivery()

    assert list(view) == [b"one\n", b"two\n"]
