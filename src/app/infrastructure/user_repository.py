from datetime import datetime
from uuid import UUID
from typing import Optional
from sqlalchemy import DateTime, case, literal, select, update

from src.app.core.domain.models import User, UserClaim, UserRole
from src.shared.database.base_repo import BaseRepository
from src.shared.database.database import Database

from src.app.infrastructure.entities.user_entity import UserEntity, UserClaimEntity, UserRoleEntity
from src.app.infrastructure.mappers.user_mapper import UserMapper, UserClaimMapper, UserRoleMapper


class UserRepository(BaseRepository[UserEntity, User]):
    """
    Repository for identity store users.

    Sign-in bookkeeping is written with single UPDATE statements so that
    concurrent attempts on the same account all count.
    """

    def __init__(self, db: Database, mapper: UserMapper):
        super().__init__(db, mapper)

    async def get_by_id(self, user_id: UUID) -> Optional[User]:
        return await self.find_one(
            select(UserEntity).where(UserEntity.id == user_id)
        )

    async def get_by_normalized_email(self, normalized_email: str) -> Optional[User]:
        """Get a user by its upper-cased email."""
        return await self.find_one(
            select(UserEntity).where(UserEntity.normalized_email == normalized_email)
        )

    async def record_failed_access(
        self, user_id: UUID, max_attempts: int, lockout_end: datetime
    ) -> Optional[User]:
        """
        Count a failed password check and lock the account once the limit is hit.

        Reaching the limit sets lockout_end and resets the counter in the same
        statement. Accounts with lockout disabled only accumulate failures.

        Returns:
            The user as stored after the update, or None if it no longer exists
        """
        failed_count = UserEntity.access_failed_count + 1
        reaches_limit = UserEntity.lockout_enabled.is_(True) & (failed_count >= max_attempts)
        statement = (
            update(UserEntity)
            .where(UserEntity.id == user_id)
            .values(
                access_failed_count=case((reaches_limit, 0), else_=failed_count),
                lockout_end=case(
                    (reaches_limit, literal(lockout_end, DateTime(timezone=True))),
                    else_=UserEntity.lockout_end,
                ),
            )
            .returning(UserEntity)
            .execution_options(synchronize_session=False)
        )
        return await self._write_one(statement)

    async def reset_failed_access(self, user_id: UUID) -> None:
        """Clear the failed-attempt counter after a successful sign-in."""
        await self._write_one(
            update(UserEntity)
            .where(UserEntity.id == user_id)
            .values(access_failed_count=0)
            .returning(UserEntity)
            .execution_options(synchronize_session=False)
        )

    async def _write_one(self, statement) -> Optional[User]:
        async with self.db.session_maker() as session:
            result = await session.execute(statement)
            entity = result.scalar_one_or_none()
            user = None if entity is None else self.mapper.to_model(entity)
            await session.commit()
            return user


class UserClaimRepository(BaseRepository[UserClaimEntity, UserClaim]):
    """Repository for claims granted to users."""

    def __init__(self, db: Database, mapper: UserClaimMapper):
        super().__init__(db, mapper)

    async def get_by_user_id(self, user_id: UUID) -> list[UserClaim]:
        return await self.find_all(
            select(UserClaimEntity)
            .where(UserClaimEntity.user_id == user_id)
            .order_by(UserClaimEntity.id)
        )


class UserRoleRepository(BaseRepository[UserRoleEntity, UserRole]):
    """Repository for user role membership."""

    def __init__(self, db: Database, mapper: UserRoleMapper):
        super().__init__(db, mapper)

    async def get_by_user_id(self, user_id: UUID) -> list[UserRole]:
        return await self.find_all(
            select(UserRoleEntity)
            .where(UserRoleEntity.user_id == user_id)
            .order_by(UserRoleEntity.role_name)
        )
