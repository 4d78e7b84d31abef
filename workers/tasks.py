# =============================================================================
# workers/tasks.py - Celery Task Definitions
# =============================================================================
# Background jobs the job bridge dispatches Clerk events to.
#
# Tasks:
# - sync_user: clerk/user.created -> users row + Stream chat user
# - delete_user: clerk/user.deleted -> drop users row + Stream chat user
#
# Transient store/vendor failures are retried with backoff by Celery.
# =============================================================================

import logging
from functools import lru_cache
from typing import Any

from celery import shared_task

from app.config import get_settings
from core.models.user import ClerkUserPayload
from core.services.user_service import UserService
from lib.database import DatabaseError, connect
from lib.stream_client import StreamClient, StreamClientError

logger = logging.getLogger(__name__)

RETRYABLE_ERRORS = (DatabaseError, StreamClientError)


@lru_cache(maxsize=1)
def get_user_service() -> UserService:
    """
    Build the worker process's UserService.

    The worker process is its own entry point: it loads settings and opens
    its own store handle the first time a task needs one.
    """
    settings = get_settings()
    return UserService(
        database=connect(settings),
        stream=StreamClient(settings.STREAM_API_KEY, settings.STREAM_API_SECRET),
    )


# =============================================================================
# User Lifecycle Tasks
# =============================================================================

@shared_task(
    bind=True,
    name="workers.tasks.sync_user",
    autoretry_for=RETRYABLE_ERRORS,
    retry_backoff=True,
    max_retries=3,
)
def sync_user(self, data: dict[str, Any]) -> dict[str, Any]:
    """
    Store a newly created Clerk user and register them with chat.

    Args:
        data: The Clerk user object from the event's data field

    Returns:
        Dict with:
        - success: bool
        - clerk_id: The Clerk user id
        - user_id: Our users row id
    """
    payload = ClerkUserPayload.model_validate(data)
    logger.info(f"Syncing user {payload.id}")

    user = get_user_service().sync_user(payload)

    return {
        "success": True,
        "clerk_id": payload.id,
        "user_id": str(user.get("id")),
    }


@shared_task(
    bind=True,
    name="workers.tasks.delete_user",
    autoretry_for=RETRYABLE_ERRORS,
    retry_backoff=True,
    max_retries=3,
)
def delete_user(self, data: dict[str, Any]) -> dict[str, Any]:
    """
    Remove a deleted Clerk user from our table and from chat.

    Args:
        data: The deleted-object payload; only its id is used

    Returns:
        Dict with success, clerk_id and the number of rows deleted
    """
    clerk_id = data.get("id")
    if not clerk_id:
        raise ValueError("clerk/user.deleted event has no user id")

    logger.info(f"Deleting user {clerk_id}")
    deleted = get_user_service().delete_user(clerk_id)

    return {
        "success": True,
        "clerk_id": clerk_id,
        "deleted": deleted,
    }
