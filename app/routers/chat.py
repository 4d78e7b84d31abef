# =============================================================================
# app/routers/chat.py - Chat Endpoints
# =============================================================================
# Hands the signed-in user what the browser needs to connect to Stream chat.
# The chat itself (channels, video calls) lives with the vendor.
# =============================================================================

import logging

from fastapi import APIRouter

from app.auth import CurrentUserDep
from app.dependencies import StreamDep
from core.models.user import ChatTokenResponse

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/token", response_model=ChatTokenResponse)
def get_chat_token(user: CurrentUserDep, stream: StreamDep) -> ChatTokenResponse:
    """
    Issue a chat token for the current user.

    The chat user id is the Clerk id, which is also what the sync-user job
    registers with Stream.

    Raises:
        401: If not signed in
        404: If the user hasn't been synced yet
    """
    clerk_id = str(user["clerk_id"])
    token = stream.create_user_token(clerk_id)
    logger.debug(f"Issued chat token for {clerk_id}")

    return ChatTokenResponse(
        token=token,
        userId=clerk_id,
        userName=user.get("name") or "",
        userImage=user.get("profile_image"),
    )
