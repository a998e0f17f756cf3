import uuid
from datetime import datetime, timedelta, UTC

from jose import JWTError, jwt

from src.app.config import JwtSettings
from src.app.core.domain.models import (
    AuthenticatedUser,
    ClaimValue,
    User,
    UserClaim,
    UserResponse,
    UserToken,
)
from src.shared.exceptions import AuthenticationError

ROLE_CLAIM = "role"

# Claims the token service writes itself; user claims may not override them
REGISTERED_CLAIMS = frozenset({"sub", "email", "jti", "nbf", "iat", "exp", "iss", "aud"})


def build_user_response(
    user: User,
    claims: list[UserClaim],
    roles: list[str],
    settings: JwtSettings,
    issued_at: datetime | None = None,
) -> UserResponse:
    """
    Issue a signed access token for a user.

    The token carries the subject, email, a unique token id, issue times, every
    claim granted to the user and one ``role`` claim per role.
    """
    issued_at = issued_at or datetime.now(UTC)
    expires_at = issued_at + timedelta(hours=settings.expiration_hours)
    issued_ts = int(issued_at.timestamp())

    payload: dict = {
        "sub": str(user.id),
        "email": user.email,
        "jti": str(uuid.uuid4()),
        "nbf": issued_ts,
        "iat": issued_ts,
    }
    granted = [(c.claim_type, c.claim_value) for c in claims if c.claim_type not in REGISTERED_CLAIMS]
    granted += [(ROLE_CLAIM, role) for role in roles]
    for claim_type, claim_value in granted:
        if claim_type not in payload:
            payload[claim_type] = claim_value
        elif isinstance(payload[claim_type], list):
            payload[claim_type].append(claim_value)
        else:
            payload[claim_type] = [payload[claim_type], claim_value]

    identity_claims = [ClaimValue(type=k, value=str(payload[k])) for k in ("sub", "email", "jti", "nbf", "iat")]
    identity_claims += [ClaimValue(type=t, value=v) for t, v in granted]

    payload.update({
        "iss": settings.issuer,
        "aud": settings.audience,
        "exp": int(expires_at.timestamp()),
    })

    access_token = jwt.encode(payload, settings.secret_key, algorithm=settings.algorithm)

    return UserResponse(
        access_token=access_token,
        expires_in=timedelta(hours=settings.expiration_hours).total_seconds(),
        user_token=UserToken(id=user.id, email=user.email, claims=identity_claims),
    )


class TokenService:
    """Issues access tokens and turns bearer tokens back into identities."""

    def __init__(self, settings: JwtSettings):
        self.settings = settings

    def issue(self, user: User, claims: list[UserClaim], roles: list[str]) -> UserResponse:
        return build_user_response(user, claims, roles, self.settings)

    def decode(self, token: str) -> AuthenticatedUser:
        """
        Validate a bearer token.

        Checks signature, expiry, not-before, issuer and audience.

        Raises:
            AuthenticationError: If any check fails or the subject is malformed
        """
        try:
            payload = jwt.decode(
                token,
                self.settings.secret_key,
                algorithms=[self.settings.algorithm],
                audience=self.settings.audience,
                issuer=self.settings.issuer,
            )
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {e}") from e

        try:
            user_id = uuid.UUID(payload["sub"])
        except (KeyError, TypeError, ValueError) as e:
            raise AuthenticationError("Invalid token: 'sub' is not a valid UUID") from e

        claims: dict[str, list[str]] = {}
        for claim_type, value in payload.items():
            if claim_type in REGISTERED_CLAIMS:
                continue
            values = value if isinstance(value, list) else [value]
            claims[claim_type] = [str(v) for v in values]

        return AuthenticatedUser(id=user_id, email=payload.get("email", ""), claims=claims)
