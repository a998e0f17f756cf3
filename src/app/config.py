"""Application configuration with structured settings groups."""
import logging
from functools import lru_cache

from pydantic import BaseModel, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

logger = logging.getLogger(__name__)


# =============================================================================
# Nested Settings Models
# =============================================================================


class JwtSettings(BaseModel):
    """
    Token signing settings.

    expiration_hours: Lifetime of issued access tokens.
    issuer / audience: Written into every token and checked when decoding.
    """

    secret_key: str = "change-me-this-is-not-a-production-secret"
    algorithm: str = "HS256"
    expiration_hours: int = 1
    issuer: str = "MinimalClientApi"
    audience: str = "https://localhost"


class PasswordSettings(BaseModel):
    """Password strength policy applied when accounts are created."""

    required_length: int = 6
    required_unique_chars: int = 1
    require_digit: bool = True
    require_lowercase: bool = True
    require_uppercase: bool = True
    require_non_alphanumeric: bool = True


class LockoutSettings(BaseModel):
    """
    Account lockout settings.

    After max_failed_access_attempts consecutive wrong passwords the account
    is locked for lockout_minutes.
    """

    max_failed_access_attempts: int = 5
    lockout_minutes: int = 5
    allowed_for_new_users: bool = True


class SignInSettings(BaseModel):
    """Preconditions checked before a password sign-in."""

    require_confirmed_email: bool = False


# =============================================================================
# Main Settings Class
# =============================================================================


class Settings(BaseSettings):
    """
    Application settings with nested configuration groups.

    Environment variables use double underscore as delimiter for nested values.
    Example: JWT__SECRET_KEY=..., LOCKOUT__MAX_FAILED_ACCESS_ATTEMPTS=3
    """

    # Application metadata
    app_name: str = "Minimal Client API"
    app_version: str = "1.0.0"
    log_level: str = "INFO"

    # Database
    database_url: str = "postgresql+asyncpg://localhost/minimal_api"

    # Nested settings groups
    jwt: JwtSettings = JwtSettings()
    password: PasswordSettings = PasswordSettings()
    lockout: LockoutSettings = LockoutSettings()
    sign_in: SignInSettings = SignInSettings()

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def validate_log_level(cls, v: str) -> str:
        """Accept any standard logging level name, case-insensitively."""
        level = str(v).upper()
        if not isinstance(logging.getLevelName(level), int):
            raise ValueError(f"Invalid log level: {v!r}")
        return level


@lru_cache()
def get_settings() -> Settings:
    """Get cached settings instance."""
    return Settings()
