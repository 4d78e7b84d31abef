# =============================================================================
# core/models/ - Pydantic Data Models
# =============================================================================
# This package contains Pydantic schemas for data validation:
# - user.py: Clerk user payloads, user rows, chat token responses
#
# These models define the "contract" between API, jobs and clients.
# =============================================================================

from .user import (
    ChatTokenResponse,
    ClerkEmailAddress,
    ClerkUserPayload,
    UserCreate,
)

__all__ = [
    "ChatTokenResponse",
    "ClerkEmailAddress",
    "ClerkUserPayload",
    "UserCreate",
]
