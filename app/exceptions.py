# =============================================================================
# app/exceptions.py - Custom Exception Handlers
# =============================================================================
# Centralized exception handling for the API.
# Errors should tell HOW to fix, not just WHAT failed.
# =============================================================================

import logging
from typing import Any

from fastapi import Request
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ArenaException(Exception):
    """
    Base exception for the Interview Arena API.

    All custom HTTP-facing exceptions inherit from this class.
    Provides structured error responses with actionable suggestions.
    """

    def __init__(
        self,
        message: str,
        code: str = "ARENA_ERROR",
        status_code: int = 500,
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
    ):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code
        self.suggestion = suggestion
        self.details = details or {}
        self.headers = headers

    def to_dict(self) -> dict[str, Any]:
        """Convert exception to API response dict."""
        result = {
            "detail": self.message,
            "code": self.code,
        }
        if self.suggestion:
            result["suggestion"] = self.suggestion
        if self.details:
            result["details"] = self.details
        return result


# =============================================================================
# Request Exceptions
# =============================================================================

class InvalidJSONBodyError(ArenaException):
    """Raised when a request declares JSON but the body doesn't parse."""

    def __init__(self, reason: str):
        super().__init__(
            message="Malformed JSON body",
            code="INVALID_JSON",
            status_code=400,
            suggestion="Send a valid JSON document or change the Content-Type header",
            details={"reason": reason},
        )


class PayloadTooLargeError(ArenaException):
    """Raised when a JSON body exceeds the configured size limit."""

    def __init__(self, limit: int):
        super().__init__(
            message="Request body too large",
            code="PAYLOAD_TOO_LARGE",
            status_code=413,
            suggestion=f"Keep JSON bodies under {limit} bytes",
            details={"limit": limit},
        )


# =============================================================================
# Auth Exceptions
# =============================================================================

class NotAuthenticatedError(ArenaException):
    """Raised when a protected route is hit without a valid session."""

    def __init__(self):
        super().__init__(
            message="Unauthorized - you must be logged in",
            code="NOT_AUTHENTICATED",
            status_code=401,
            suggestion="Sign in and retry with the session cookie or a Bearer token",
            headers={"WWW-Authenticate": "Bearer"},
        )


class UserNotFoundError(ArenaException):
    """Raised when the signed-in identity has no user row yet."""

    def __init__(self, clerk_id: str):
        super().__init__(
            message="User not found",
            code="USER_NOT_FOUND",
            status_code=404,
            suggestion="The account may still be syncing; retry in a few seconds",
            details={"clerk_id": clerk_id},
        )


# =============================================================================
# Job Bridge Exceptions
# =============================================================================

class InvalidJobSignatureError(ArenaException):
    """Raised when a job webhook call isn't signed with our signing key."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Invalid job signature: {reason}",
            code="INVALID_SIGNATURE",
            status_code=401,
            suggestion="Check INNGEST_SIGNING_KEY matches the key configured in the orchestrator",
        )


class InvalidJobEventError(ArenaException):
    """Raised when a delivered event payload is missing its name."""

    def __init__(self, reason: str):
        super().__init__(
            message=f"Invalid job event: {reason}",
            code="INVALID_JOB_EVENT",
            status_code=400,
            suggestion='Send a body shaped like {"event": {"name": "...", "data": {...}}}',
        )


class JobFunctionNotFoundError(ArenaException):
    """Raised when fnId names a function we never registered."""

    def __init__(self, function_id: str, available: list[str]):
        super().__init__(
            message=f"Job function not found: {function_id}",
            code="JOB_FUNCTION_NOT_FOUND",
            status_code=404,
            suggestion="Re-sync the app with the orchestrator (PUT /api/inngest)",
            details={"function_id": function_id, "available": available},
        )


# =============================================================================
# Exception Handlers
# =============================================================================

async def arena_exception_handler(request: Request, exc: ArenaException) -> JSONResponse:
    """Render an ArenaException as its structured JSON body."""
    if exc.status_code >= 500:
        logger.error(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    else:
        logger.info(f"{exc.code} on {request.method} {request.url.path}: {exc.message}")
    return JSONResponse(
        status_code=exc.status_code,
        content=exc.to_dict(),
        headers=exc.headers,
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle unexpected exceptions."""
    logger.exception(f"Unexpected error: {exc}")
    return JSONResponse(
        status_code=500,
        content={
            "detail": "An unexpected error occurred",
            "code": "INTERNAL_ERROR",
        }
    )
