"""Mappers for converting between domain models and API schemas."""
from src.app.core.domain.models import Client, UserResponse
from src.client.schemas import (
    ClaimResponse,
    ClientResponse,
    IdentityErrorResponse,
    TokenResponse,
    UserTokenResponse,
)
from src.shared.exceptions import IdentityError


def to_client_response(client: Client) -> ClientResponse:
    """
    Convert a Client domain model to ClientResponse API schema.

    Args:
        client: Domain model

    Returns:
        API response schema
    """
    return ClientResponse(
        id=client.id,
        name=client.name,
        document=client.document,
        phone=client.phone,
    )


def to_token_response(user_response: UserResponse) -> TokenResponse:
    """Convert an issued UserResponse to the TokenResponse API schema."""
    user_token = user_response.user_token
    return TokenResponse(
        access_token=user_response.access_token,
        expires_in=user_response.expires_in,
        user_token=UserTokenResponse(
            id=user_token.id,
            email=user_token.email,
            claims=[ClaimResponse(type=c.type, value=c.value) for c in user_token.claims],
        ),
    )


def to_identity_errors(error: IdentityError) -> list[IdentityErrorResponse]:
    """Convert the failures carried by an IdentityError to API schemas."""
    return [IdentityErrorResponse(**item) for item in error.errors]
