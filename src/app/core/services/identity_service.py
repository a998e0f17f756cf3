import logging
from datetime import datetime, timedelta, UTC
from typing import Callable

from sqlalchemy.exc import IntegrityError

from src.app.config import LockoutSettings, PasswordSettings, SignInSettings
from src.app.core.domain.models import SignInResult, User, UserClaim, UserRole
from src.app.core.services.password_hasher import PasswordHasher
from src.app.infrastructure.user_repository import (
    UserClaimRepository,
    UserRepository,
    UserRoleRepository,
)
from src.shared.database.unit_of_work import UnitOfWork
from src.shared.exceptions import EntityNotFound, IdentityError

logger = logging.getLogger(__name__)


def normalize_email(email: str) -> str:
    return email.strip().upper()


def identity_error(code: str, description: str) -> dict[str, str]:
    return {"code": code, "description": description}


def check_password_policy(password: str, policy: PasswordSettings) -> list[dict[str, str]]:
    """Return every policy rule the password breaks."""
    errors = []
    if len(password) < policy.required_length:
        errors.append(identity_error(
            "PasswordTooShort",
            f"Passwords must be at least {policy.required_length} characters.",
        ))
    if policy.require_non_alphanumeric and password.isalnum():
        errors.append(identity_error(
            "PasswordRequiresNonAlphanumeric",
            "Passwords must have at least one non alphanumeric character.",
        ))
    if policy.require_digit and not any(c.isdigit() for c in password):
        errors.append(identity_error(
            "PasswordRequiresDigit",
            "Passwords must have at least one digit ('0'-'9').",
        ))
    if policy.require_lowercase and not any(c.islower() for c in password):
        errors.append(identity_error(
            "PasswordRequiresLower",
            "Passwords must have at least one lowercase ('a'-'z').",
        ))
    if policy.require_uppercase and not any(c.isupper() for c in password):
        errors.append(identity_error(
            "PasswordRequiresUpper",
            "Passwords must have at least one uppercase ('A'-'Z').",
        ))
    if policy.required_unique_chars >= 1 and len(set(password)) < policy.required_unique_chars:
        errors.append(identity_error(
            "PasswordRequiresUniqueChars",
            f"Passwords must use at least {policy.required_unique_chars} different characters.",
        ))
    return errors


class IdentityService:
    """
    Account store: creation, password sign-in with lockout, claims and roles.

    Args:
        user_repository: Reads users
        claim_repository: Reads user claims
        role_repository: Reads user role membership
        unit_of_work: Writes users, claims and roles
        password_hasher: Hashes and verifies passwords
        password_settings: Strength policy for new passwords
        lockout_settings: Failed-attempt threshold and lockout duration
        sign_in_settings: Preconditions for signing in
        clock: Returns the current UTC time
    """

    def __init__(
        self,
        user_repository: UserRepository,
        claim_repository: UserClaimRepository,
        role_repository: UserRoleRepository,
        unit_of_work: UnitOfWork,
        password_hasher: PasswordHasher,
        password_settings: PasswordSettings,
        lockout_settings: LockoutSettings,
        sign_in_settings: SignInSettings,
        clock: Callable[[], datetime] | None = None,
    ):
        self.user_repository = user_repository
        self.claim_repository = claim_repository
        self.role_repository = role_repository
        self.unit_of_work = unit_of_work
        self.password_hasher = password_hasher
        self.password_settings = password_settings
        self.lockout_settings = lockout_settings
        self.sign_in_settings = sign_in_settings
        self.clock = clock or (lambda: datetime.now(UTC))

    async def find_by_email(self, email: str) -> User | None:
        return await self.user_repository.get_by_normalized_email(normalize_email(email))

    async def get_by_email(self, email: str) -> User:
        user = await self.find_by_email(email)
        if user is None:
            raise EntityNotFound("User", email)
        return user

    async def create_user(self, email: str, password: str, email_confirmed: bool = False) -> User:
        """
        Create an account whose user name is its email.

        Raises:
            IdentityError: If the email is taken or the password breaks the policy,
                listing every failure found
        """
        normalized_email = normalize_email(email)
        duplicate = identity_error("DuplicateUserName", f"Username '{email}' is already taken.")

        # User errors first, then password errors, reported together
        errors = []
        if await self.user_repository.get_by_normalized_email(normalized_email) is not None:
            errors.append(duplicate)
        errors += check_password_policy(password, self.password_settings)
        if errors:
            raise IdentityError(errors)

        user = User(
            email=email.strip(),
            normalized_email=normalized_email,
            password_hash=self.password_hasher.hash_password(password),
            email_confirmed=email_confirmed,
            lockout_enabled=self.lockout_settings.allowed_for_new_users,
            created_at=self.clock(),
        )

        try:
            async with self.unit_of_work:
                self.unit_of_work.add(user)
                await self.unit_of_work.save_changes()
        except IntegrityError as e:
            # Concurrent registration of the same email
            raise IdentityError([duplicate]) from e

        logger.info("Created user %s", user.id)
        return user

    async def password_sign_in(
        self, email: str, password: str, lockout_on_failure: bool = True
    ) -> SignInResult:
        """Check a password, tracking failures toward lockout when asked to."""
        user = await self.find_by_email(email)
        if user is None:
            return SignInResult.FAILED

        if self.sign_in_settings.require_confirmed_email and not user.email_confirmed:
            logger.warning("Sign-in refused for unconfirmed user %s", user.id)
            return SignInResult.NOT_ALLOWED

        now = self.clock()
        if user.is_locked_out(now):
            logger.warning("Sign-in refused for locked out user %s", user.id)
            return SignInResult.LOCKED_OUT

        if self.password_hasher.verify_password(password, user.password_hash):
            if user.access_failed_count:
                await self.user_repository.reset_failed_access(user.id)
            return SignInResult.SUCCEEDED

        if lockout_on_failure:
            user = await self.user_repository.record_failed_access(
                user.id,
                self.lockout_settings.max_failed_access_attempts,
                now + timedelta(minutes=self.lockout_settings.lockout_minutes),
            )
            if user is not None and user.is_locked_out(now):
                logger.warning("User %s locked out until %s", user.id, user.lockout_end)
                return SignInResult.LOCKED_OUT

        return SignInResult.FAILED

    async def get_claims(self, user: User) -> list[UserClaim]:
        return await self.claim_repository.get_by_user_id(user.id)

    async def get_roles(self, user: User) -> list[str]:
        return [role.role_name for role in await self.role_repository.get_by_user_id(user.id)]

    async def add_claim(self, email: str, claim_type: str, claim_value: str = "") -> UserClaim:
        """Grant a claim to an existing user."""
        user = await self.get_by_email(email)
        claim = UserClaim(user_id=user.id, claim_type=claim_type, claim_value=claim_value)
        async with self.unit_of_work:
            self.unit_of_work.add(claim)
        logger.info("Granted claim %s to user %s", claim_type, user.id)
        return claim

    async def add_to_role(self, email: str, role_name: str) -> UserRole:
        """
        Add an existing user to a role.

        Raises:
            EntityNotFound: If no user has the email
            IdentityError: If the user is already in the role
        """
        user = await self.get_by_email(email)
        if role_name in await self.get_roles(user):
            raise IdentityError([
                identity_error("UserAlreadyInRole", f"User already in role '{role_name}'.")
            ])
        role = UserRole(user_id=user.id, role_name=role_name)
        async with self.unit_of_work:
            self.unit_of_work.add(role)
        logger.info("Added user %s to role %s", user.id, role_name)
        return role
