# =============================================================================
# lib/database.py - Supabase Database Connector
# =============================================================================
# Establishes the single long-lived store handle the process uses.
#
# connect() creates the Supabase client and pings it before returning, so a
# caller that gets a Database back knows the store is reachable. Transient
# failures are retried a bounded number of times with exponential backoff;
# when attempts run out, DatabaseConnectionError aborts startup.
#
# Usage:
#   from lib.database import connect
#   db = connect(settings)
#   user = db.fetch_user_by_clerk_id("user_123")
# =============================================================================

from __future__ import annotations

import logging
import random
import time
from typing import TYPE_CHECKING, Any

from supabase import Client, create_client

if TYPE_CHECKING:
    from app.config import Settings

# Set up logging for this module
logger = logging.getLogger(__name__)

USERS_TABLE = "users"

# Cap for a single backoff sleep
MAX_BACKOFF_SECONDS = 10.0


class DatabaseError(Exception):
    """
    Error during Supabase operations.

    Carries a code and a suggestion so logs say how to fix the problem.
    """

    def __init__(
        self,
        message: str,
        code: str = "DATABASE_ERROR",
        suggestion: str | None = None,
        details: dict[str, Any] | None = None,
    ):
        super().__init__(message)
        self.code = code
        self.message = message
        self.suggestion = suggestion
        self.details = details or {}

    def __str__(self) -> str:
        result = f"[{self.code}] {self.message}"
        if self.suggestion:
            result += f" Suggestion: {self.suggestion}"
        return result


class DatabaseConnectionError(DatabaseError):
    """Raised when the store can't be reached at startup. Fatal."""

    def __init__(self, message: str, attempts: int):
        super().__init__(
            message=message,
            code="CONNECTION_FAILED",
            suggestion="Check DB_URL and DB_SERVICE_KEY, and that the project is reachable",
            details={"attempts": attempts},
        )
        self.attempts = attempts


class Database:
    """
    The process-wide store handle.

    Wraps a Supabase client. Created by connect() before the listener binds
    and closed on shutdown; safe to share between in-flight requests.
    """

    def __init__(self, client: Client):
        self._client: Client | None = client

    @property
    def ready(self) -> bool:
        """True while the handle is open."""
        return self._client is not None

    @property
    def client(self) -> Client:
        if self._client is None:
            raise DatabaseError(
                message="Database handle is closed",
                code="HANDLE_CLOSED",
                suggestion="Use the handle only between startup and shutdown",
            )
        return self._client

    def ping(self) -> None:
        """Run the cheapest query we have; raises on failure."""
        self.client.table(USERS_TABLE).select("id").limit(1).execute()

    def close(self) -> None:
        if self._client is not None:
            logger.info("Closing database handle")
        self._client = None

    # -------------------------------------------------------------------------
    # Users
    # -------------------------------------------------------------------------

    def fetch_user_by_clerk_id(self, clerk_id: str) -> dict[str, Any] | None:
        """
        Fetch a user row by its Clerk user id.

        Returns:
            User dict, or None if no row matches

        Raises:
            DatabaseError: If the query fails
        """
        try:
            response = (
                self.client.table(USERS_TABLE)
                .select("*")
                .eq("clerk_id", clerk_id)
                .limit(1)
                .execute()
            )
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(
                message=f"Failed to fetch user: {e}",
                code="FETCH_USER_FAILED",
                details={"clerk_id": clerk_id},
            ) from e

        rows = response.data or []
        return rows[0] if rows else None

    def insert_user(self, user: dict[str, Any]) -> dict[str, Any]:
        """
        Insert a user row.

        Returns:
            Inserted user dict with generated id and created_at

        Raises:
            DatabaseError: If insert fails
        """
        try:
            response = (
                self.client.table(USERS_TABLE)
                .insert(user)
                .execute()
            )
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(
                message=f"Failed to insert user: {e}",
                code="INSERT_USER_FAILED",
                details={"clerk_id": user.get("clerk_id")},
            ) from e

        if not response.data:
            raise DatabaseError(
                message="Insert returned no data",
                code="INSERT_NO_DATA",
                details={"clerk_id": user.get("clerk_id")},
            )
        return response.data[0]

    def delete_user_by_clerk_id(self, clerk_id: str) -> int:
        """
        Delete the user row(s) for a Clerk user id.

        Returns:
            Number of rows deleted
        """
        try:
            response = (
                self.client.table(USERS_TABLE)
                .delete()
                .eq("clerk_id", clerk_id)
                .execute()
            )
        except DatabaseError:
            raise
        except Exception as e:
            raise DatabaseError(
                message=f"Failed to delete user: {e}",
                code="DELETE_USER_FAILED",
                details={"clerk_id": clerk_id},
            ) from e

        return len(response.data or [])


def _backoff_delay(attempt: int, base_delay: float) -> float:
    """base * 2^(attempt-1) plus a little jitter, capped."""
    if base_delay <= 0:
        return 0.0
    delay = base_delay * (2 ** (attempt - 1)) + random.uniform(0, base_delay / 2)
    return min(MAX_BACKOFF_SECONDS, delay)


def connect(settings: Settings) -> Database:
    """
    Establish the store connection, retrying with backoff.

    Args:
        settings: Provides DB_URL, DB_SERVICE_KEY and the retry policy

    Returns:
        Database: A pinged, ready handle

    Raises:
        DatabaseConnectionError: When every attempt failed
    """
    attempts = settings.DB_CONNECT_ATTEMPTS
    last_error: Exception | None = None

    for attempt in range(1, attempts + 1):
        try:
            client = create_client(settings.DB_URL, settings.DB_SERVICE_KEY)
            database = Database(client)
            database.ping()
            logger.info(f"Database connected (attempt {attempt}/{attempts})")
            return database
        except Exception as e:
            last_error = e
            logger.warning(f"Database connection attempt {attempt}/{attempts} failed: {e}")
            if attempt < attempts:
                time.sleep(_backoff_delay(attempt, settings.DB_CONNECT_BACKOFF_SECONDS))

    raise DatabaseConnectionError(
        message=f"Could not connect to database after {attempts} attempts: {last_error}",
        attempts=attempts,
    ) from last_error
