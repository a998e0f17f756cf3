"""Client SDK for the Minimal Client API."""
from src.client.api_client import MinimalApiClient
from src.client.schemas import (
    ClientRequest,
    ClientResponse,
    LoginUserRequest,
    RegisterUserRequest,
    TokenResponse,
)

__all__ = [
    "MinimalApiClient",
    "ClientRequest",
    "ClientResponse",
    "LoginUserRequest",
    "RegisterUserRequest",
    "TokenResponse",
]
