# =============================================================================
# app/auth/models.py - Authentication Models
# =============================================================================
# Pydantic models for authentication data.
# =============================================================================

from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field


class AuthContext(BaseModel):
    """
    Auth information attached to every request by the auth stage.

    Signed-out requests get an AuthContext too, with no user_id. Handlers
    check is_signed_in; the context itself never blocks anything.
    """

    model_config = ConfigDict(frozen=True)

    user_id: Optional[str] = None
    session_id: Optional[str] = None
    claims: dict[str, Any] = Field(default_factory=dict)

    @property
    def is_signed_in(self) -> bool:
        return self.user_id is not None

    @classmethod
    def signed_out(cls) -> "AuthContext":
        return cls()

    @classmethod
    def from_claims(cls, claims: dict[str, Any]) -> "AuthContext":
        """Build from verified Clerk session claims (sub = user, sid = session)."""
        return cls(
            user_id=claims.get("sub"),
            session_id=claims.get("sid"),
            claims=claims,
        )
