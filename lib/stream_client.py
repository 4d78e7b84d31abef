# =============================================================================
# lib/stream_client.py - Stream Chat Client
# =============================================================================
# Minimal server-side client for the Stream chat API.
#
# Only what the app needs:
# - create_user_token(): JWT the browser uses to connect to chat
# - upsert_user() / delete_user(): keep chat users in step with our users
#
# Tokens are HS256 JWTs signed with STREAM_API_SECRET. Server calls carry a
# server token ({"server": true}) in the Authorization header.
# =============================================================================

from __future__ import annotations

import logging
from typing import Any

import httpx
from jose import jwt

logger = logging.getLogger(__name__)

STREAM_BASE_URL = "https://chat.stream-io-api.com"


class StreamClientError(Exception):
    """Error talking to the Stream API."""

    def __init__(self, message: str, code: str = "STREAM_ERROR", status_code: int | None = None):
        super().__init__(message)
        self.message = message
        self.code = code
        self.status_code = status_code

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"


def create_user_token(user_id: str, api_secret: str) -> str:
    """
    Create the token a browser uses to connect as `user_id`.

    Example:
        token = create_user_token("user_2abc", settings.STREAM_API_SECRET)
    """
    return jwt.encode({"user_id": user_id}, api_secret, algorithm="HS256")


class StreamClient:
    """
    Server-side Stream API client.

    Args:
        api_key: STREAM_API_KEY
        api_secret: STREAM_API_SECRET
        http_client: Optional httpx.Client (tests pass one with a MockTransport)
    """

    def __init__(
        self,
        api_key: str,
        api_secret: str,
        http_client: httpx.Client | None = None,
        timeout: float = 10.0,
    ):
        self.api_key = api_key
        self._api_secret = api_secret
        self._http = http_client or httpx.Client(base_url=STREAM_BASE_URL, timeout=timeout)

    def _server_headers(self) -> dict[str, str]:
        server_token = jwt.encode({"server": True}, self._api_secret, algorithm="HS256")
        return {
            "Authorization": server_token,
            "stream-auth-type": "jwt",
        }

    def _request(self, method: str, path: str, **kwargs) -> dict[str, Any]:
        params = {"api_key": self.api_key, **kwargs.pop("params", {})}
        try:
            response = self._http.request(
                method,
                path,
                params=params,
                headers=self._server_headers(),
                **kwargs,
            )
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            raise StreamClientError(
                message=f"Stream {method} {path} failed: {e.response.text[:200]}",
                code="STREAM_HTTP_ERROR",
                status_code=e.response.status_code,
            ) from e
        except httpx.HTTPError as e:
            raise StreamClientError(
                message=f"Stream {method} {path} failed: {e}",
                code="STREAM_UNREACHABLE",
            ) from e

        return response.json() if response.content else {}

    def create_user_token(self, user_id: str) -> str:
        return create_user_token(user_id, self._api_secret)

    def upsert_user(self, user_id: str, name: str | None = None, image: str | None = None) -> dict[str, Any]:
        """Create or update a chat user."""
        user: dict[str, Any] = {"id": user_id}
        if name:
            user["name"] = name
        if image:
            user["image"] = image

        result = self._request("POST", "/users", json={"users": {user_id: user}})
        logger.info(f"Upserted Stream user: {user_id}")
        return result

    def delete_user(self, user_id: str) -> dict[str, Any]:
        """Soft-delete a chat user."""
        result = self._request("DELETE", f"/users/{user_id}")
        logger.info(f"Deleted Stream user: {user_id}")
        return result

    def close(self) -> None:
        self._http.close()
