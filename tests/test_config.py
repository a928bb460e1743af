"""Tests for settings read from the environment."""
import io

from httpx_mockhandler import Behavior, MockHandler, get_settings
from httpx_mockhandler.responses import create_response
from httpx_mockhandler.streams import SharedStreamSource


def test_defaults(monkeypatch):
    monkeypatch.delenv("HTTPX_MOCKHANDLER_BEHAVIOR", raising=False)
    settings = get_settings()

    assert settings.BEHAVIOR is Behavior.LOOSE
    assert settings.LOOSE_STATUS_CODE == 404
    assert settings.STREAM_CHUNK_SIZE == 65536


def test_behavior_from_environment(monkeypatch):
    monkeypatch.setenv("HTTPX_MOCKHANDLER_BEHAVIOR", "strict")
    monkeypatch.setenv("HTTPX_MOCKHANDLER_LOOSE_STATUS_CODE", "418")

    handler = MockHandler()

    assert handler.behavior is Behavior.STRICT
    assert handler.loose_status_code == 418


def test_constructor_arguments_win(monkeypatch):
    monkeypatch.setenv("HTTPX_MOCKHANDLER_BEHAVIOR", "strict")

    handler = MockHandler(Behavior.LOOSE, loose_status_code=500)

    assert handler.behavior is Behavior.LOOSE
    assert handler.loose_status_code == 500


def test_stream_chunk_size(monkeypatch):
    monkeypatch.setenv("HTTPX_MOCKHANDLER_STREAM_CHUNK_SIZE", "4")
    response = create_response(content=SharedStreamSource(io.BytesIO(b"0123456789")))

    assert list(response.iter_raw()) == [b"0123", b"4567", b"89"]
