from passlib.context import CryptContext


class PasswordHasher:
    """Hashes and verifies account passwords with passlib."""

    def __init__(self, schemes: list[str] | None = None):
        self.crypt_context = CryptContext(schemes=schemes or ["pbkdf2_sha256"], deprecated="auto")

    def hash_password(self, password: str) -> str:
        """Return the hash of a plain text password."""
        return self.crypt_context.hash(password)

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify if the plain text password matches the stored hash."""
        return self.crypt_context.verify(plain_password, hashed_password)
