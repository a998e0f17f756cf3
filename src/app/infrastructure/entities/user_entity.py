from datetime import datetime
from uuid import UUID, uuid4
from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from src.shared.database.database import Base


class UserEntity(Base):
    """SQLAlchemy model for the identity store's users table."""
    __tablename__ = "users"

    id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    email: Mapped[str] = mapped_column(String(256))
    normalized_email: Mapped[str] = mapped_column(String(256), unique=True, index=True)
    password_hash: Mapped[str] = mapped_column(String(512))
    email_confirmed: Mapped[bool] = mapped_column(Boolean, default=False)
    lockout_enabled: Mapped[bool] = mapped_column(Boolean, default=True)
    lockout_end: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    access_failed_count: Mapped[int] = mapped_column(Integer, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False
    )


class UserClaimEntity(Base):
    """SQLAlchemy model for claims granted to a user."""
    __tablename__ = "user_claims"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), index=True)
    claim_type: Mapped[str] = mapped_column(String(256))
    claim_value: Mapped[str] = mapped_column(String(512), default="")


class UserRoleEntity(Base):
    """SQLAlchemy model for user role membership."""
    __tablename__ = "user_roles"

    user_id: Mapped[UUID] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), primary_key=True)
    role_name: Mapped[str] = mapped_column(String(256), primary_key=True)
