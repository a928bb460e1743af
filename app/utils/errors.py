"""Error types for the example application and upstream response checks."""
from typing import Optional

import httpx
from fastapi import status


class AppError(Exception):
    """Base exception for application errors."""
    def __init__(self, message: str, status_code: int = 500):
        self.message = message
        self.status_code = status_code
        super().__init__(message)


class UpstreamError(AppError):
    """An upstream API failed or returned something unusable."""
    def __init__(self, message: str, upstream_status: Optional[int] = None):
        self.upstream_status = upstream_status
        super().__init__(message, status.HTTP_502_BAD_GATEWAY)


class ThrottledError(UpstreamError):
    """Upstream API throttling."""
    def __init__(self, message: str, retry_after: Optional[int]):
        self.retry_after = retry_after
        super().__init__(message, status.HTTP_429_TOO_MANY_REQUESTS)


def check_upstream_response(response: httpx.Response) -> None:
    """
    Raise for upstream error responses.

    Args:
        response: The httpx response to check

    Raises:
        ThrottledError: For rate limiting
        UpstreamError: For any other error status
    """
    if response.status_code == status.HTTP_429_TOO_MANY_REQUESTS:
        raise ThrottledError(
            "Upstream API is rate limiting requests",
            retry_after=get_retry_after(response.headers),
        )

    elif response.status_code >= 400:
        message = "Unknown error"
        try:
            error_data = response.json()
        except ValueError:
            error_data = None
        if isinstance(error_data, dict):
            message = error_data.get("message", message)
        raise UpstreamError(
            f"{response.request.method} {response.request.url} failed with "
            f"{response.status_code}: {message}",
            response.status_code,
        )


def get_retry_after(headers: httpx.Headers) -> Optional[int]:
    """
    Extract a Retry-After value in seconds from response headers.

    HTTP-date values are not supported and yield None.
    """
    retry_after = headers.get("Retry-After")
    if not retry_after:
        return None

    try:
        return int(retry_after)
    except ValueError:
        return None
