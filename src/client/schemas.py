"""API schemas for client and account requests and responses."""
from uuid import UUID
from pydantic import BaseModel, Field


class RegisterUserRequest(BaseModel):
    """
    Request schema for creating an account.

    Fields are optional at the schema level so that missing values reach the
    explicit validators and come back as a field-keyed error map.
    """
    email: str | None = None
    password: str | None = None


class LoginUserRequest(BaseModel):
    """Request schema for signing in with email and password."""
    email: str | None = None
    password: str | None = None


class ClientRequest(BaseModel):
    """Request schema for creating or replacing a client."""
    id: UUID | None = Field(default=None, description="Ignored on create; must match the route on update")
    name: str | None = None
    document: str | None = None
    phone: str | None = None


class ClientResponse(BaseModel):
    """Response schema for client data returned by the API."""
    id: UUID
    name: str
    document: str
    phone: str

    model_config = {"from_attributes": True}


class ClaimResponse(BaseModel):
    type: str
    value: str


class UserTokenResponse(BaseModel):
    id: UUID
    email: str
    claims: list[ClaimResponse] = Field(default_factory=list)


class TokenResponse(BaseModel):
    """Response schema for a successful registration or login."""
    access_token: str
    expires_in: float = Field(..., description="Token lifetime in seconds")
    user_token: UserTokenResponse

    model_config = {"from_attributes": True}


class IdentityErrorResponse(BaseModel):
    code: str
    description: str


class ValidationProblemResponse(BaseModel):
    """Body returned when one or more fields fail validation."""
    title: str = "One or more validation errors occurred."
    status: int = 422
    errors: dict[str, list[str]]
