"""Database entities for the infrastructure layer."""
from src.app.infrastructure.entities.client_entity import ClientEntity
from src.app.infrastructure.entities.user_entity import UserEntity, UserClaimEntity, UserRoleEntity

__all__ = [
    "ClientEntity",
    "UserEntity",
    "UserClaimEntity",
    "UserRoleEntity",
]
