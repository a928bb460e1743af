"""FastAPI dependency providers."""
from fastapi import Request

from .config import Settings
from .http_clients import HttpClientFactory


def get_client_factory(request: Request) -> HttpClientFactory:
    """Get the application's HTTP client factory."""
    return request.app.state.http_clients


def get_app_settings(request: Request) -> Settings:
    """Get the settings the application was created with."""
    return request.app.state.settings
