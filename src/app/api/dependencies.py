"""
Authorization dependencies for the API routes.

Bearer tokens are validated before a handler runs; a missing or invalid
token yields 401 and a missing claim yields 403.
"""
from dependency_injector.wiring import Provide, inject
from fastapi import Depends, HTTPException, Security, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from src.app.containers import Container
from src.app.core.domain.models import AuthenticatedUser
from src.app.core.services.token_service import TokenService
from src.app.logging import get_logger
from src.shared.exceptions import AuthenticationError, AuthorizationError

DELETE_CLIENT_CLAIM = "ExcluirCliente"

bearer_scheme = HTTPBearer(auto_error=False)
logger = get_logger(__name__)


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


@inject
async def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Security(bearer_scheme),
    token_service: TokenService = Depends(Provide[Container.token_service]),
) -> AuthenticatedUser:
    """Resolve the caller from the Authorization header."""
    if credentials is None:
        raise _unauthorized("Not authenticated")
    try:
        return token_service.decode(credentials.credentials)
    except AuthenticationError as e:
        logger.warning(f"Rejected bearer token: {e}")
        raise _unauthorized("Invalid or expired token")


def require_claim(claim_type: str):
    """
    Returns a dependency that only lets through callers holding a claim of the given type.

    Usage:
        @router.delete(..., dependencies=[Depends(require_claim("ExcluirCliente"))])
    """

    async def claim_checker(
        current_user: AuthenticatedUser = Depends(get_current_user),
    ) -> AuthenticatedUser:
        if not current_user.has_claim(claim_type):
            error = AuthorizationError(claim_type)
            logger.warning(f"User {current_user.id} denied: {error}")
            raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(error))
        return current_user

    return claim_checker
