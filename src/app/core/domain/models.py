"""Domain models used in business logic."""
import uuid
from datetime import datetime, UTC
from enum import StrEnum
from uuid import UUID

from pydantic import BaseModel, Field


CLIENT_NAME_MAX_LENGTH = 200
CLIENT_DOCUMENT_MAX_LENGTH = 14
CLIENT_PHONE_MAX_LENGTH = 11


class Client(BaseModel):
    """Domain model for Client used in business logic."""
    id: UUID = Field(default_factory=uuid.uuid4, description="Unique client ID")
    name: str = Field(..., min_length=1, max_length=CLIENT_NAME_MAX_LENGTH)
    document: str = Field(..., min_length=1, max_length=CLIENT_DOCUMENT_MAX_LENGTH)
    phone: str = Field(..., min_length=1, max_length=CLIENT_PHONE_MAX_LENGTH)

    model_config = {"from_attributes": True}


class User(BaseModel):
    """Domain model for an account in the identity store."""
    id: UUID = Field(default_factory=uuid.uuid4, description="Unique user ID")
    email: str = Field(..., min_length=1)
    normalized_email: str = Field(..., min_length=1)
    password_hash: str
    email_confirmed: bool = False
    lockout_enabled: bool = True
    lockout_end: datetime | None = None
    access_failed_count: int = Field(default=0, ge=0)
    created_at: datetime = Field(default_factory=lambda: datetime.now(UTC))

    model_config = {"from_attributes": True}

    def is_locked_out(self, now: datetime) -> bool:
        """Whether sign-in is currently denied by an active lockout."""
        if not self.lockout_enabled or self.lockout_end is None:
            return False
        return self.lockout_end > now


class UserClaim(BaseModel):
    """A claim granted to a user."""
    id: int | None = None
    user_id: UUID
    claim_type: str = Field(..., min_length=1)
    claim_value: str = ""

    model_config = {"from_attributes": True}


class UserRole(BaseModel):
    """Membership of a user in a named role."""
    user_id: UUID
    role_name: str = Field(..., min_length=1)

    model_config = {"from_attributes": True}


class SignInResult(StrEnum):
    """Outcome of a password sign-in attempt."""
    SUCCEEDED = "SUCCEEDED"
    FAILED = "FAILED"
    LOCKED_OUT = "LOCKED_OUT"
    NOT_ALLOWED = "NOT_ALLOWED"


class ClaimValue(BaseModel):
    """A single claim as exposed in a token response."""
    type: str
    value: str


class UserToken(BaseModel):
    """Identity summary embedded in a token response."""
    id: UUID
    email: str
    claims: list[ClaimValue] = Field(default_factory=list)


class UserResponse(BaseModel):
    """Issued access token together with the identity it was issued for."""
    access_token: str
    expires_in: float = Field(..., description="Token lifetime in seconds")
    user_token: UserToken


class AuthenticatedUser(BaseModel):
    """Identity recovered from a validated bearer token."""
    id: UUID
    email: str
    claims: dict[str, list[str]] = Field(default_factory=dict)

    def has_claim(self, claim_type: str, value: str | None = None) -> bool:
        values = self.claims.get(claim_type)
        if not values:
            return False
        return value is None or value in values

    @property
    def roles(self) -> list[str]:
        return self.claims.get("role", [])
