"""Infrastructure mappers for converting between domain models and database entities."""
from src.app.infrastructure.mappers.client_mapper import ClientMapper
from src.app.infrastructure.mappers.user_mapper import UserMapper, UserClaimMapper, UserRoleMapper

__all__ = [
    "ClientMapper",
    "UserMapper",
    "UserClaimMapper",
    "UserRoleMapper",
]
