# =============================================================================
# app/auth/dependencies.py - FastAPI Auth Dependencies
# =============================================================================
# The auth stage only decorates requests; gating happens here, per route.
#
# Usage:
#   from app.auth import require_user
#
#   @router.get("/protected")
#   async def protected(user: dict = Depends(require_user)):
#       return {"clerk_id": user["clerk_id"]}
# =============================================================================

import logging
from typing import Annotated, Any

from fastapi import Depends, Request

from app.auth.models import AuthContext
from app.dependencies import get_database
from app.exceptions import NotAuthenticatedError, UserNotFoundError
from lib.database import Database

logger = logging.getLogger(__name__)


def get_auth(request: Request) -> AuthContext:
    """
    Return the AuthContext the auth stage attached.

    Falls back to signed-out if the stage didn't run (e.g. a bare router in
    a test app).
    """
    return getattr(request.state, "auth", None) or AuthContext.signed_out()


def require_auth(auth: Annotated[AuthContext, Depends(get_auth)]) -> AuthContext:
    """
    Require a signed-in request.

    Raises:
        NotAuthenticatedError: 401 if no valid session is attached
    """
    if not auth.is_signed_in:
        raise NotAuthenticatedError()
    return auth


def require_user(
    auth: Annotated[AuthContext, Depends(require_auth)],
    database: Annotated[Database, Depends(get_database)],
) -> dict[str, Any]:
    """
    Require a signed-in request whose user has been synced to our table.

    Returns:
        The user row

    Raises:
        NotAuthenticatedError: 401 if signed out
        UserNotFoundError: 404 if the Clerk user has no row yet
    """
    user = database.fetch_user_by_clerk_id(auth.user_id)
    if not user:
        logger.warning(f"Signed-in user has no row: {auth.user_id}")
        raise UserNotFoundError(auth.user_id)
    return user


# Type aliases for dependency injection
AuthDep = Annotated[AuthContext, Depends(get_auth)]
CurrentUserDep = Annotated[dict[str, Any], Depends(require_user)]
