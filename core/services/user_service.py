# =============================================================================
# core/services/user_service.py - User Business Logic
# =============================================================================
# Keeps our users table and the chat vendor's users in step with Clerk.
# Separates job/HTTP concerns from database and vendor calls.
# =============================================================================

import logging
from typing import Any

from lib.database import Database
from lib.stream_client import StreamClient
from core.models.user import ClerkUserPayload, UserCreate

logger = logging.getLogger(__name__)


class UserService:
    """
    Service for user lifecycle operations.

    Args:
        database: The process store handle
        stream: Chat vendor client
    """

    def __init__(self, database: Database, stream: StreamClient):
        self.database = database
        self.stream = stream

    def sync_user(self, payload: ClerkUserPayload) -> dict[str, Any]:
        """
        Store a newly created Clerk user and register them with chat.

        Idempotent: an existing row for the same clerk_id is returned as-is,
        so redelivered events don't create duplicates.

        Returns:
            The user row
        """
        existing = self.database.fetch_user_by_clerk_id(payload.id)
        if existing:
            logger.info(f"User already synced: {payload.id}")
            user = existing
        else:
            user = self.database.insert_user(UserCreate.from_clerk(payload).model_dump())
            logger.info(f"Created user: {payload.id}")

        self.stream.upsert_user(
            user_id=str(user["clerk_id"]),
            name=user.get("name"),
            image=user.get("profile_image"),
        )
        return user

    def delete_user(self, clerk_id: str) -> int:
        """
        Remove a deleted Clerk user from the users table and from chat.

        Returns:
            Number of rows deleted
        """
        deleted = self.database.delete_user_by_clerk_id(clerk_id)
        logger.info(f"Deleted {deleted} user row(s) for: {clerk_id}")

        self.stream.delete_user(clerk_id)
        return deleted
