"""Example application listing a GitHub user's repositories.

Running this server makes requests to the real GitHub API; the integration
tests replace the ``github`` client's transport with a mock handler.
"""
import logging
import time
from contextlib import asynccontextmanager
from typing import AsyncIterator, List, Optional

import httpx
from fastapi import Depends, FastAPI, Request
from fastapi.responses import JSONResponse, PlainTextResponse
from pydantic import TypeAdapter, ValidationError

from .config import Settings, get_settings
from .deps import get_app_settings, get_client_factory
from .http_clients import HttpClientFactory
from .models import GitHubRepository
from .telemetry.log import log_error, log_timing, setup_logging
from .utils.errors import AppError, UpstreamError, check_upstream_response

logger = logging.getLogger(__name__)

GITHUB_CLIENT = "github"

_repositories = TypeAdapter(List[GitHubRepository])


def configure_http_clients(settings: Settings) -> HttpClientFactory:
    """Register the named clients the application uses."""
    factory = HttpClientFactory()
    factory.add_client(
        GITHUB_CLIENT,
        base_url=settings.github_api_base_url,
        headers={"Accept": settings.github_accept, "User-Agent": settings.user_agent},
        timeout=settings.request_timeout,
    )
    return factory


async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    log_error(exc, {"path": request.url.path})
    return JSONResponse(status_code=exc.status_code, content={"detail": exc.message})


async def fetch_repositories(client: httpx.AsyncClient, user: str) -> List[GitHubRepository]:
    """Fetch the public repositories of ``user``."""
    started = time.perf_counter()
    try:
        response = await client.get(f"/users/{user}/repos")
    except httpx.RequestError as exc:
        raise UpstreamError(f"Could not reach GitHub: {exc}") from exc
    log_timing("github.list_repositories", (time.perf_counter() - started) * 1000, {"user": user})

    check_upstream_response(response)
    try:
        return _repositories.validate_json(response.content)
    except ValidationError as exc:
        raise UpstreamError(f"Unexpected repository listing from GitHub: {exc}", response.status_code) from exc


async def list_repositories(
    factory: HttpClientFactory = Depends(get_client_factory),
    settings: Settings = Depends(get_app_settings),
) -> PlainTextResponse:
    """List the configured user's repositories, one per line."""
    async with factory.create_client(GITHUB_CLIENT) as client:
        repos = await fetch_repositories(client, settings.github_user)

    return PlainTextResponse("".join(f"{repo.describe()}\n" for repo in repos))


def create_app(settings: Optional[Settings] = None) -> FastAPI:
    """Create the application with its named HTTP clients."""
    settings = settings or get_settings()

    @asynccontextmanager
    async def lifespan(_: FastAPI) -> AsyncIterator[None]:
        setup_logging(settings.log_level, settings.log_format)
        logger.info({"event": "app.startup", "github_user": settings.github_user})
        yield

    application = FastAPI(title=settings.app_name, debug=settings.debug, lifespan=lifespan)
    application.state.settings = settings
    application.state.http_clients = configure_http_clients(settings)
    application.add_exception_handler(AppError, app_error_handler)
    application.add_api_route("/", list_repositories, methods=["GET"], response_class=PlainTextResponse)
    return application


app = create_app()
