from fastapi import APIRouter, Body, Depends
from dependency_injector.wiring import Provide, inject

from src.app.api.errors import bad_request
from src.app.api.mappers import to_identity_errors, to_token_response
from src.app.containers import Container
from src.app.core.domain.models import SignInResult, User
from src.app.core.services.identity_service import IdentityService
from src.app.core.services.token_service import TokenService
from src.app.core.services.validation import ensure_valid, validate_credentials
from src.client.schemas import IdentityErrorResponse, LoginUserRequest, RegisterUserRequest, TokenResponse
from src.shared.exceptions import IdentityError
from src.app.logging import get_logger

USER_NOT_PROVIDED = "User not provided"
USER_LOCKED_OUT = "User locked out"
INVALID_CREDENTIALS = "Invalid user or password"

router = APIRouter(tags=["users"])
logger = get_logger(__name__)


async def _issue_token(
    user: User, identity_service: IdentityService, token_service: TokenService
) -> TokenResponse:
    claims = await identity_service.get_claims(user)
    roles = await identity_service.get_roles(user)
    return to_token_response(token_service.issue(user, claims, roles))


@router.post(
    "/registro",
    response_model=TokenResponse,
    responses={400: {"model": list[IdentityErrorResponse] | str}},
)
@inject
async def register_user(
    request: RegisterUserRequest | None = Body(None),
    identity_service: IdentityService = Depends(Provide[Container.identity_service]),
    token_service: TokenService = Depends(Provide[Container.token_service]),
):
    """
    Create an account and sign it in.

    Accounts created here are confirmed immediately. A refused account gets a
    400 whose body is the list of identity errors.
    """
    if request is None:
        return bad_request(USER_NOT_PROVIDED)

    ensure_valid(validate_credentials(request.email, request.password))

    try:
        user = await identity_service.create_user(request.email, request.password, email_confirmed=True)
    except IdentityError as e:
        logger.warning(f"Registration refused: {e}")
        return bad_request([error.model_dump() for error in to_identity_errors(e)])

    return await _issue_token(user, identity_service, token_service)


@router.post("/login", response_model=TokenResponse, responses={400: {"model": str}})
@inject
async def login_user(
    request: LoginUserRequest | None = Body(None),
    identity_service: IdentityService = Depends(Provide[Container.identity_service]),
    token_service: TokenService = Depends(Provide[Container.token_service]),
):
    """
    Sign in with email and password.

    Failed attempts count toward lockout.
    """
    if request is None:
        return bad_request(USER_NOT_PROVIDED)

    ensure_valid(validate_credentials(request.email, request.password))

    result = await identity_service.password_sign_in(request.email, request.password, lockout_on_failure=True)
    if result == SignInResult.LOCKED_OUT:
        return bad_request(USER_LOCKED_OUT)
    if result != SignInResult.SUCCEEDED:
        logger.info(f"Sign-in failed for {request.email}: {result}")
        return bad_request(INVALID_CREDENTIALS)

    user = await identity_service.get_by_email(request.email)
    return await _issue_token(user, identity_service, token_service)
