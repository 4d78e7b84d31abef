# =============================================================================
# app/auth/session.py - Clerk Session Token Verification
# =============================================================================
# Verifies Clerk session tokens (short-lived JWTs).
#
# The browser sends the token either as the `__session` cookie (same-origin,
# credentials: include) or as `Authorization: Bearer <token>`. Tokens are
# RS256-signed; public keys come from Clerk's JWKS endpoint and are cached.
#
# Usage:
#   verifier = ClerkSessionVerifier.from_settings(settings)
#   claims = verifier.verify(token)   # raises SessionTokenError
# =============================================================================

from __future__ import annotations

import logging
import time
from typing import TYPE_CHECKING, Any, Optional, Protocol

import httpx
from jose import ExpiredSignatureError, JWTError, jwt

if TYPE_CHECKING:
    from starlette.requests import HTTPConnection

    from app.config import Settings

logger = logging.getLogger(__name__)

SESSION_COOKIE = "__session"
JWKS_CACHE_TTL = 3600  # 1 hour


class SessionTokenError(Exception):
    """A session token was present but failed verification."""


class SessionVerifier(Protocol):
    """Anything that turns a session token into verified claims."""

    def verify(self, token: str) -> dict[str, Any]:
        ...

    def close(self) -> None:
        ...


def extract_session_token(connection: HTTPConnection) -> Optional[str]:
    """
    Pull the session token off a request.

    The Authorization header wins over the cookie, matching how Clerk's own
    middleware treats cross-origin callers.
    """
    authorization = connection.headers.get("authorization", "")
    scheme, _, credentials = authorization.partition(" ")
    if scheme.lower() == "bearer" and credentials.strip():
        return credentials.strip()

    cookie = connection.cookies.get(SESSION_COOKIE)
    return cookie or None


class ClerkSessionVerifier:
    """
    Verify Clerk session tokens against the instance's JWKS.

    Args:
        jwks_url: Clerk JWKS endpoint
        secret_key: CLERK_SECRET_KEY, authorizes the JWKS fetch
        authorized_parties: Origins allowed in the `azp` claim
        algorithms: Accepted signing algorithms
        http_client: Optional httpx.Client (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        jwks_url: str,
        secret_key: str,
        authorized_parties: list[str] | None = None,
        algorithms: tuple[str, ...] = ("RS256",),
        http_client: httpx.Client | None = None,
    ):
        self.jwks_url = jwks_url
        self._secret_key = secret_key
        self.authorized_parties = authorized_parties or []
        self.algorithms = algorithms
        self._owns_http = http_client is None
        self._http = http_client or httpx.Client(timeout=10)
        self._jwks_cache: dict = {}
        self._jwks_cache_time: float = 0

    @classmethod
    def from_settings(cls, settings: Settings) -> "ClerkSessionVerifier":
        return cls(
            jwks_url=settings.CLERK_JWKS_URL,
            secret_key=settings.CLERK_SECRET_KEY,
            authorized_parties=settings.cors_origins_list,
        )

    def close(self) -> None:
        """Close the HTTP client if this verifier created it."""
        if self._owns_http:
            self._http.close()

    def _fetch_jwks(self, force: bool = False) -> dict:
        """Fetch JWKS from Clerk with caching."""
        current_time = time.time()

        if not force and self._jwks_cache and (current_time - self._jwks_cache_time) < JWKS_CACHE_TTL:
            return self._jwks_cache

        try:
            response = self._http.get(
                self.jwks_url,
                headers={"Authorization": f"Bearer {self._secret_key}"},
            )
            response.raise_for_status()
            self._jwks_cache = response.json()
            self._jwks_cache_time = current_time
            logger.debug(f"Fetched JWKS from {self.jwks_url}")
            return self._jwks_cache
        except (httpx.HTTPError, ValueError) as e:
            logger.warning(f"Failed to fetch JWKS: {e}")
            # Return cached even if expired, as fallback
            if self._jwks_cache:
                return self._jwks_cache
            return {"keys": []}

    def _signing_key(self, token: str) -> dict:
        try:
            header = jwt.get_unverified_header(token)
        except JWTError as e:
            raise SessionTokenError(f"Unreadable token header: {e}") from e

        kid = header.get("kid")
        if not kid:
            raise SessionTokenError("Token header has no kid")

        # A kid we don't know may mean keys were rotated; refetch once
        for force in (False, True):
            for key in self._fetch_jwks(force=force).get("keys", []):
                if key.get("kid") == kid:
                    return key

        raise SessionTokenError(f"No signing key for kid={kid}")

    def verify(self, token: str) -> dict[str, Any]:
        """
        Verify a session token and return its claims.

        Raises:
            SessionTokenError: Bad signature, expired, or wrong authorized party
        """
        key = self._signing_key(token)

        try:
            claims = jwt.decode(
                token,
                key,
                algorithms=list(self.algorithms),
                options={"verify_aud": False},
            )
        except ExpiredSignatureError as e:
            raise SessionTokenError("Session token has expired") from e
        except JWTError as e:
            raise SessionTokenError(f"Invalid session token: {e}") from e

        if not claims.get("sub"):
            raise SessionTokenError("Session token missing 'sub' claim")

        azp = claims.get("azp")
        if azp and self.authorized_parties and azp.rstrip("/") not in self.authorized_parties:
            raise SessionTokenError(f"Unauthorized party: {azp}")

        return claims
