"""Library defaults loaded from the environment."""
from enum import Enum

from pydantic_settings import BaseSettings, SettingsConfigDict


class Behavior(str, Enum):
    """How a handler answers requests that no setup matches."""

    LOOSE = "loose"
    STRICT = "strict"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_prefix="HTTPX_MOCKHANDLER_", extra="ignore")

    BEHAVIOR: Behavior = Behavior.LOOSE
    # Status of the empty response returned for unmatched requests in loose mode
    LOOSE_STATUS_CODE: int = 404
    STREAM_CHUNK_SIZE: int = 64 * 1024


def get_settings() -> Settings:
    """Read settings from the environment on every call so tests can patch it."""
    return Settings()
