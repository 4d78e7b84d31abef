# =============================================================================
# app/dependencies.py - Shared Dependencies
# =============================================================================
# FastAPI dependency injection for shared resources.
# Everything here comes off app.state, which create_app() fills in from the
# settings it was given. These are injected into route handlers using Depends().
# =============================================================================

from typing import Annotated

from fastapi import Depends, Request

from app.config import Settings
from lib.database import Database
from lib.stream_client import StreamClient


def get_app_settings(request: Request) -> Settings:
    """Get the settings the app was built with."""
    return request.app.state.settings


def get_database(request: Request) -> Database:
    """Get the process store handle."""
    return request.app.state.database


def get_stream_client(request: Request) -> StreamClient:
    """Get the chat vendor client."""
    return request.app.state.stream


# Type aliases for dependency injection
SettingsDep = Annotated[Settings, Depends(get_app_settings)]
DatabaseDep = Annotated[Database, Depends(get_database)]
StreamDep = Annotated[StreamClient, Depends(get_stream_client)]
