"""Custom exceptions for the application."""
from typing import Any


class EntityNotFound(Exception):
    """Raised when an entity is not found in the database."""

    def __init__(self, entity_name: str, entity_id: Any):
        """
        Initialize the exception.

        Args:
            entity_name: Name of the entity that was not found
            entity_id: ID of the entity that was not found
        """
        super().__init__(f"{entity_name} with ID {entity_id} not found")
        self.entity_name = entity_name
        self.entity_id = entity_id


class EntityValidationError(Exception):
    """Raised when an incoming payload breaks one or more field constraints."""

    def __init__(self, errors: dict[str, list[str]]):
        """
        Initialize the exception.

        Args:
            errors: Mapping of field name to the list of violated constraints
        """
        fields = ", ".join(sorted(errors))
        super().__init__(f"Validation failed for: {fields}")
        self.errors = errors


class PersistenceError(Exception):
    """Raised when a write reaches the database but affects no rows."""

    def __init__(self, entity_name: str, operation: str):
        super().__init__(f"Failed to {operation} {entity_name}: no rows affected")
        self.entity_name = entity_name
        self.operation = operation


class AuthError(Exception):
    """Base class for authentication and authorization failures."""


class AuthenticationError(AuthError):
    """Raised when a bearer token is missing, malformed, expired or forged."""


class AuthorizationError(AuthError):
    """Raised when an authenticated caller lacks a required claim."""

    def __init__(self, claim_type: str):
        super().__init__(f"Missing required claim '{claim_type}'")
        self.claim_type = claim_type


class IdentityError(Exception):
    """
    Raised when the identity store refuses an operation.

    Carries every failure found, each as a ``{"code", "description"}`` pair,
    so callers can report them together.
    """

    def __init__(self, errors: list[dict[str, str]]):
        super().__init__("; ".join(error["description"] for error in errors))
        self.errors = errors
