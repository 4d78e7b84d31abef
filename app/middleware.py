# =============================================================================
# app/middleware.py - Request Pipeline
# =============================================================================
# The middleware chain as an explicit, ordered list of stages.
#
# Order matters and is fixed:
#   1. json_body  - reads: raw body      writes: nothing (rejects bad or oversized JSON)
#   2. cors       - reads: Origin header writes: Access-Control-* headers
#   3. auth       - reads: session token writes: request.state.auth
#   -> route dispatch
#
# Stages listed first run first (outermost). install_pipeline() takes care of
# Starlette's "last added is outermost" rule.
# =============================================================================

from __future__ import annotations

import json
import logging
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.concurrency import run_in_threadpool
from starlette.requests import HTTPConnection
from starlette.types import ASGIApp, Message, Receive, Scope, Send

from app.auth.models import AuthContext
from app.auth.session import SessionTokenError, SessionVerifier, extract_session_token
from app.exceptions import ArenaException, InvalidJSONBodyError, PayloadTooLargeError

if TYPE_CHECKING:
    from app.config import Settings

logger = logging.getLogger(__name__)

# Matches express.json()'s default limit
DEFAULT_MAX_JSON_BODY_BYTES = 100 * 1024


@dataclass(frozen=True)
class PipelineStage:
    """One request-transform stage and its contract."""

    name: str
    middleware: type
    options: dict[str, Any] = field(default_factory=dict)
    reads: str = ""
    writes: str = ""


# =============================================================================
# Stage 1: JSON body parsing
# =============================================================================

def _declares_json(scope: Scope) -> bool:
    for name, value in scope.get("headers", []):
        if name == b"content-type":
            media_type = value.split(b";", 1)[0].strip().lower()
            return media_type == b"application/json" or media_type.endswith(b"+json")
    return False


def _content_length(scope: Scope) -> int | None:
    for name, value in scope.get("headers", []):
        if name == b"content-length":
            try:
                return int(value)
            except ValueError:
                return None
    return None


class JSONBodyMiddleware:
    """
    Reject malformed or oversized JSON bodies before anything else sees them.

    Only requests that declare a JSON content type and carry a body are
    checked. Reading stops as soon as the body passes `max_bytes`. The
    buffered body is replayed to the app unchanged.
    """

    def __init__(self, app: ASGIApp, max_bytes: int = DEFAULT_MAX_JSON_BODY_BYTES):
        self.app = app
        self.max_bytes = max_bytes

    async def _reject(self, error: ArenaException, scope: Scope, receive: Receive, send: Send) -> None:
        response = JSONResponse(status_code=error.status_code, content=error.to_dict())
        await response(scope, receive, send)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] != "http" or not _declares_json(scope):
            await self.app(scope, receive, send)
            return

        declared = _content_length(scope)
        if declared is not None and declared > self.max_bytes:
            logger.info(f"Rejected {declared}-byte JSON body on {scope.get('path')}")
            await self._reject(PayloadTooLargeError(self.max_bytes), scope, receive, send)
            return

        chunks: list[bytes] = []
        size = 0
        disconnected = False
        while True:
            message = await receive()
            if message["type"] == "http.disconnect":
                disconnected = True
                break
            chunk = message.get("body", b"")
            size += len(chunk)
            if size > self.max_bytes:
                logger.info(f"Rejected oversized JSON body on {scope.get('path')}")
                await self._reject(PayloadTooLargeError(self.max_bytes), scope, receive, send)
                return
            chunks.append(chunk)
            if not message.get("more_body", False):
                break

        body = b"".join(chunks)
        if body.strip() and not disconnected:
            try:
                json.loads(body)
            except ValueError as e:
                logger.info(f"Rejected malformed JSON on {scope.get('path')}: {e}")
                await self._reject(InvalidJSONBodyError(str(e)), scope, receive, send)
                return

        replayed = False

        async def replay() -> Message:
            nonlocal replayed
            if disconnected:
                return {"type": "http.disconnect"}
            if not replayed:
                replayed = True
                return {"type": "http.request", "body": body, "more_body": False}
            return await receive()

        await self.app(scope, replay, send)


# =============================================================================
# Stage 3: Auth-session decoration
# =============================================================================

class AuthSessionMiddleware:
    """
    Attach an AuthContext to every request as request.state.auth.

    Never rejects a request: a missing or invalid token simply yields a
    signed-out context. Routes that need a user gate on it themselves.
    """

    def __init__(self, app: ASGIApp, verifier: SessionVerifier):
        self.app = app
        self.verifier = verifier

    async def authenticate(self, connection: HTTPConnection) -> AuthContext:
        token = extract_session_token(connection)
        if not token:
            return AuthContext.signed_out()

        try:
            # JWKS fetches are blocking; keep them off the event loop
            claims = await run_in_threadpool(self.verifier.verify, token)
        except SessionTokenError as e:
            logger.debug(f"Ignoring session token: {e}")
            return AuthContext.signed_out()

        return AuthContext.from_claims(claims)

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] in ("http", "websocket"):
            auth = await self.authenticate(HTTPConnection(scope))
            scope.setdefault("state", {})["auth"] = auth
        await self.app(scope, receive, send)


# =============================================================================
# Pipeline
# =============================================================================

def build_pipeline(settings: Settings, verifier: SessionVerifier) -> list[PipelineStage]:
    """
    The ordered stages every request passes through before dispatch.
    """
    return [
        PipelineStage(
            name="json_body",
            middleware=JSONBodyMiddleware,
            options={"max_bytes": settings.MAX_JSON_BODY_BYTES},
            reads="request body when Content-Type is JSON",
            writes="nothing; 400 INVALID_JSON on malformed bodies, 413 past the size limit",
        ),
        PipelineStage(
            name="cors",
            middleware=CORSMiddleware,
            options={
                "allow_origins": settings.cors_origins_list,
                "allow_credentials": True,
                "allow_methods": ["*"],
                "allow_headers": ["*"],
            },
            reads="Origin and Access-Control-Request-* headers",
            writes="Access-Control-* response headers; answers preflights",
        ),
        PipelineStage(
            name="auth",
            middleware=AuthSessionMiddleware,
            options={"verifier": verifier},
            reads="Authorization header or __session cookie",
            writes="request.state.auth (AuthContext)",
        ),
    ]


def install_pipeline(app: FastAPI, stages: list[PipelineStage]) -> None:
    """Install stages so that stages[0] is the outermost middleware."""
    for stage in reversed(stages):
        app.add_middleware(stage.middleware, **stage.options)

    logger.debug(f"Request pipeline: {' -> '.join(stage.name for stage in stages)}")
