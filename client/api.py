# =============================================================================
# client/api.py - API Client
# =============================================================================
# The one preconfigured HTTP client the frontend talks to the backend with.
#
# Requests go to a fixed base URL and share one cookie jar, so the Clerk
# session cookie travels with every request, cross-origin ones included.
# No retries, timeouts or interceptors beyond httpx's defaults.
#
# Usage:
#   from client.api import get_api_client
#   response = get_api_client().get("/chat/token")
# =============================================================================

from functools import lru_cache

import httpx
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ClientSettings(BaseSettings):
    """Frontend build-time settings."""

    API_URL: str = Field(
        default="http://localhost:3000/api",
        description="Backend API base URL"
    )

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=True,
        extra="ignore",
        frozen=True,
    )


def create_api_client(
    base_url: str,
    cookies: httpx.Cookies | None = None,
    transport: httpx.BaseTransport | None = None,
) -> httpx.Client:
    """
    Build an API client that always sends its cookies.

    Args:
        base_url: Backend API base URL
        cookies: Starting cookie jar (e.g. the signed-in session)
        transport: Custom transport (tests pass an httpx.MockTransport)
    """
    return httpx.Client(
        base_url=base_url,
        cookies=cookies or httpx.Cookies(),
        transport=transport,
    )


@lru_cache(maxsize=1)
def get_api_client() -> httpx.Client:
    """The shared client instance."""
    return create_api_client(ClientSettings().API_URL)
