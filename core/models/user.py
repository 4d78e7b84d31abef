# =============================================================================
# core/models/user.py - User Schemas
# =============================================================================
# These models define the contract for user data:
# - ClerkUserPayload: The user object Clerk sends in user.* events
# - UserCreate: The row we store in the users table
# - ChatTokenResponse: Output of GET /api/chat/token
#
# Users are created by the sync-user job, never by an API call.
# =============================================================================

from pydantic import BaseModel, ConfigDict, Field


class ClerkEmailAddress(BaseModel):
    """One entry of a Clerk user's email_addresses list."""

    model_config = ConfigDict(extra="ignore")

    email_address: str


class ClerkUserPayload(BaseModel):
    """
    Clerk user object as delivered in clerk/user.created events.

    Example:
        {
            "id": "user_2abc",
            "email_addresses": [{"email_address": "ada@example.com"}],
            "first_name": "Ada",
            "last_name": "Lovelace",
            "image_url": "https://img.clerk.com/..."
        }
    """

    model_config = ConfigDict(extra="ignore")

    id: str = Field(..., min_length=1)
    email_addresses: list[ClerkEmailAddress] = Field(default_factory=list)
    first_name: str | None = None
    last_name: str | None = None
    image_url: str | None = None

    @property
    def primary_email(self) -> str | None:
        return self.email_addresses[0].email_address if self.email_addresses else None

    @property
    def full_name(self) -> str:
        return " ".join(part for part in (self.first_name, self.last_name) if part)


class UserCreate(BaseModel):
    """Row written to the users table."""

    clerk_id: str = Field(..., min_length=1)
    email: str | None = None
    name: str = ""
    profile_image: str | None = None

    @classmethod
    def from_clerk(cls, payload: ClerkUserPayload) -> "UserCreate":
        return cls(
            clerk_id=payload.id,
            email=payload.primary_email,
            name=payload.full_name,
            profile_image=payload.image_url,
        )


class ChatTokenResponse(BaseModel):
    """
    Chat connection details for the signed-in user.

    Field names are camelCase because the browser SDK consumes them as-is.
    """

    token: str
    userId: str
    userName: str
    userImage: str | None = None
