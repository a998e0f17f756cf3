from datetime import datetime, UTC

from src.shared.database.base_mapper import BaseEntityMapper
from src.app.core.domain.models import User, UserClaim, UserRole
from src.app.infrastructure.entities.user_entity import UserEntity, UserClaimEntity, UserRoleEntity


def _as_utc(value: datetime | None) -> datetime | None:
    # SQLite drops tzinfo on the way back
    if value is None or value.tzinfo is not None:
        return value
    return value.replace(tzinfo=UTC)


class UserMapper(BaseEntityMapper[User, UserEntity]):
    """Mapper for converting between User domain model and UserEntity."""

    @staticmethod
    def to_entity(model_instance: User) -> UserEntity:
        return UserEntity(
            id=model_instance.id,
            email=model_instance.email,
            normalized_email=model_instance.normalized_email,
            password_hash=model_instance.password_hash,
            email_confirmed=model_instance.email_confirmed,
            lockout_enabled=model_instance.lockout_enabled,
            lockout_end=model_instance.lockout_end,
            access_failed_count=model_instance.access_failed_count,
            created_at=model_instance.created_at,
        )

    @staticmethod
    def to_model(entity: UserEntity) -> User:
        return User(
            id=entity.id,
            email=entity.email,
            normalized_email=entity.normalized_email,
            password_hash=entity.password_hash,
            email_confirmed=entity.email_confirmed,
            lockout_enabled=entity.lockout_enabled,
            lockout_end=_as_utc(entity.lockout_end),
            access_failed_count=entity.access_failed_count,
            created_at=_as_utc(entity.created_at),
        )


class UserClaimMapper(BaseEntityMapper[UserClaim, UserClaimEntity]):
    """Mapper for converting between UserClaim and UserClaimEntity."""

    @staticmethod
    def to_entity(model_instance: UserClaim) -> UserClaimEntity:
        return UserClaimEntity(
            id=model_instance.id,
            user_id=model_instance.user_id,
            claim_type=model_instance.claim_type,
            claim_value=model_instance.claim_value,
        )

    @staticmethod
    def to_model(entity: UserClaimEntity) -> UserClaim:
        return UserClaim(
            id=entity.id,
            user_id=entity.user_id,
            claim_type=entity.claim_type,
            claim_value=entity.claim_value,
        )


class UserRoleMapper(BaseEntityMapper[UserRole, UserRoleEntity]):
    """Mapper for converting between UserRole and UserRoleEntity."""

    @staticmethod
    def to_entity(model_instance: UserRole) -> UserRoleEntity:
        return UserRoleEntity(
            user_id=model_instance.user_id,
            role_name=model_instance.role_name,
        )

    @staticmethod
    def to_model(entity: UserRoleEntity) -> UserRole:
        return UserRole(
            user_id=entity.user_id,
            role_name=entity.role_name,
        )
