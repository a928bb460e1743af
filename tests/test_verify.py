"""Tests for verifying the requests a handler received."""
import pytest

from httpx_mockhandler import Times, VerificationError

URL = "https://api.example.com/orders"


def test_verify_any_request(handler, client):
    handler.setup_any_request().returns_response(200)
    client.get(URL)
    client.post(URL)

    handler.verify_any_request()
    handler.verify_any_request(times=Times.exactly(2))
    handler.verify_request("POST", URL, times=Times.once())
    handler.verify_request("DELETE", URL, times=Times.never())


def test_verify_failure_message(handler, client):
    handler.setup_any_request().returns_response(200)
    client.get(URL)

    with pytest.raises(VerificationError) as exc_info:
        handler.verify_request("POST", URL, times=Times.once(), fail_message="order was not submitted")

    error = exc_info.value
    assert isinstance(error, AssertionError)
    assert error.actual == 0
    assert error.expected == Times.once()
    assert str(error).startswith("order was not submitted\n")
    assert "POST https://api.example.com/orders exactly 1 time" in str(error)


def test_verify_defaults_to_at_least_once(handler):
    with pytest.raises(VerificationError, match="at least 1 time, but it was performed 0 times"):
        handler.verify_any_request()


def test_verify_with_predicate(handler, client):
    handler.setup_any_request().returns_response(200)
    client.post(URL, json={"sku": "A1"})
    client.post(URL, json={"sku": "B2"})

    handler.verify_request("POST", URL, lambda request: b'"A1"' in request.content, times=Times.once())


def test_requests_are_recorded_in_order(handler, client):
    handler.setup_any_request().returns_response(200)
    client.get(URL)
    client.delete(URL)

    assert [request.method for request in handler.requests] == ["GET", "DELETE"]
    assert handler.send.await_count == 2


def test_verify_all(handler, client):
    handler.setup_request("GET", URL).returns_response(200)
    handler.setup_request("POST", URL).returns_response(201)
    client.get(URL)

    with pytest.raises(VerificationError, match="POST https://api.example.com/orders"):
        handler.verify_all()

    client.post(URL)
    handler.verify_all()


@pytest.mark.parametrize(
    ("times", "accepted", "rejected"),
    [
        (Times.exactly(2), [2], [1, 3]),
        (Times.at_least(2), [2, 50], [1]),
        (Times.at_most(2), [0, 2], [3]),
        (Times.between(1, 3), [1, 3], [0, 4]),
        (Times.never(), [0], [1]),
        (Times.at_most_once(), [0, 1], [2]),
    ],
)
def test_times_ranges(times, accepted, rejected):
    assert all(times.matches(count) for count in accepted)
    assert not any(times.matches(count) for count in rejected)


def test_times_rejects_invalid_range():
    with pytest.raises(ValueError):
        Times.between(3, 1)
    with pytest.raises(ValueError):
        Times.exactly(-1)
