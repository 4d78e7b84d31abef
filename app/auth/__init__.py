# =============================================================================
# app/auth/__init__.py - Authentication Module
# =============================================================================
# Clerk session verification, the per-request AuthContext, and the
# dependencies that gate protected routes.
#
# Usage:
#   from app.auth import require_user
#
#   @router.get("/protected")
#   async def protected(user: dict = Depends(require_user)):
#       return {"clerk_id": user["clerk_id"]}
# =============================================================================

from app.auth.dependencies import (
    AuthDep,
    CurrentUserDep,
    get_auth,
    require_auth,
    require_user,
)
from app.auth.models import AuthContext
from app.auth.session import (
    ClerkSessionVerifier,
    SessionTokenError,
    SessionVerifier,
    extract_session_token,
)

__all__ = [
    "AuthContext",
    "AuthDep",
    "ClerkSessionVerifier",
    "CurrentUserDep",
    "SessionTokenError",
    "SessionVerifier",
    "extract_session_token",
    "get_auth",
    "require_auth",
    "require_user",
]
