"""
Explicit field validation for incoming payloads.

Each validator returns a mapping of field name to the list of violated
constraints; an empty mapping means the payload is valid.
"""
from email_validator import EmailNotValidError, validate_email

from src.app.core.domain.models import (
    CLIENT_DOCUMENT_MAX_LENGTH,
    CLIENT_NAME_MAX_LENGTH,
    CLIENT_PHONE_MAX_LENGTH,
)
from src.shared.exceptions import EntityValidationError

PASSWORD_MIN_LENGTH = 6
PASSWORD_MAX_LENGTH = 100

ValidationErrors = dict[str, list[str]]


def required(field: str, value: str | None) -> list[str]:
    if value is None or not value.strip():
        return [f"The {field} field is required."]
    return []


def max_length(field: str, value: str | None, limit: int) -> list[str]:
    if value is not None and len(value) > limit:
        return [f"The field {field} must be a string with a maximum length of {limit}."]
    return []


def length_between(field: str, value: str | None, minimum: int, maximum: int) -> list[str]:
    if value is None or minimum <= len(value) <= maximum:
        return []
    return [
        f"The field {field} must be a string with a minimum length of {minimum} "
        f"and a maximum length of {maximum}."
    ]


def email_address(field: str, value: str | None) -> list[str]:
    if value is None or not value.strip():
        return []
    try:
        validate_email(value, check_deliverability=False, test_environment=True, globally_deliverable=False)
    except EmailNotValidError:
        return [f"The {field} field is not a valid e-mail address."]
    return []


def _collect(checks: dict[str, list[str]]) -> ValidationErrors:
    return {field: messages for field, messages in checks.items() if messages}


def validate_client(name: str | None, document: str | None, phone: str | None) -> ValidationErrors:
    """Check the Client constraints: every field required and bounded."""
    return _collect({
        "name": required("name", name) or max_length("name", name, CLIENT_NAME_MAX_LENGTH),
        "document": required("document", document)
        or max_length("document", document, CLIENT_DOCUMENT_MAX_LENGTH),
        "phone": required("phone", phone) or max_length("phone", phone, CLIENT_PHONE_MAX_LENGTH),
    })


def validate_credentials(email: str | None, password: str | None) -> ValidationErrors:
    """Check the fields shared by the registration and login payloads."""
    return _collect({
        "email": required("email", email) or email_address("email", email),
        "password": required("password", password)
        or length_between("password", password, PASSWORD_MIN_LENGTH, PASSWORD_MAX_LENGTH),
    })


def ensure_valid(errors: ValidationErrors) -> None:
    """Raise EntityValidationError when any field failed."""
    if errors:
        raise EntityValidationError(errors)
