import asyncio
from typing import cast

import pytest
from httpx import HTTPStatusError

from src.client import LoginUserRequest, RegisterUserRequest

PASSWORD = "Str0ng!Pass"


@pytest.mark.asyncio
async def test_register_returns_token(api_client, token_service):
    """Registering signs the new account in straight away."""
    response = await api_client.register(RegisterUserRequest(email="ana@example.com", password=PASSWORD))

    assert response.access_token
    assert response.expires_in == 3600
    assert response.user_token.email == "ana@example.com"
    claim_types = [claim.type for claim in response.user_token.claims]
    assert claim_types == ["sub", "email", "jti", "nbf", "iat"]

    identity = token_service.decode(response.access_token)
    assert identity.id == response.user_token.id
    assert identity.email == "ana@example.com"


@pytest.mark.asyncio
async def test_register_confirms_email(api_client, identity_service):
    await api_client.register(RegisterUserRequest(email="bia@example.com", password=PASSWORD))

    user = await identity_service.get_by_email("bia@example.com")
    assert user.email_confirmed is True
    assert user.password_hash != PASSWORD


@pytest.mark.asyncio
async def test_register_without_body(http_client):
    response = await http_client.post("/registro")

    assert response.status_code == 400
    assert response.json() == "User not provided"


@pytest.mark.asyncio
async def test_register_validation_errors(api_client):
    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.register(RegisterUserRequest(email="not-an-email", password="abc"))

    error = cast(HTTPStatusError, exc_info.value)
    assert error.response.status_code == 422
    errors = error.response.json()["errors"]
    assert errors["email"] == ["The email field is not a valid e-mail address."]
    assert errors["password"] == [
        "The field password must be a string with a minimum length of 6 and a maximum length of 100."
    ]


@pytest.mark.asyncio
async def test_register_missing_fields(api_client):
    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.register(RegisterUserRequest())

    errors = exc_info.value.response.json()["errors"]
    assert errors == {
        "email": ["The email field is required."],
        "password": ["The password field is required."],
    }


@pytest.mark.asyncio
async def test_register_weak_password(api_client):
    """Every broken password rule is reported."""
    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.register(RegisterUserRequest(email="weak@example.com", password="abcdef"))

    error = cast(HTTPStatusError, exc_info.value)
    assert error.response.status_code == 400
    codes = {e["code"] for e in error.response.json()}
    assert codes == {
        "PasswordRequiresNonAlphanumeric",
        "PasswordRequiresDigit",
        "PasswordRequiresUpper",
    }


@pytest.mark.asyncio
async def test_register_duplicate_email(api_client):
    await api_client.register(RegisterUserRequest(email="dup@example.com", password=PASSWORD))

    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.register(RegisterUserRequest(email="DUP@example.com", password=PASSWORD))

    error = cast(HTTPStatusError, exc_info.value)
    assert error.response.status_code == 400
    assert [e["code"] for e in error.response.json()] == ["DuplicateUserName"]


@pytest.mark.asyncio
async def test_register_reports_duplicate_and_password_errors_together(api_client):
    await api_client.register(RegisterUserRequest(email="both@example.com", password=PASSWORD))

    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.register(RegisterUserRequest(email="both@example.com", password="abcdef"))

    body = exc_info.value.response.json()
    assert isinstance(body, list)
    assert body[0] == {
        "code": "DuplicateUserName",
        "description": "Username 'both@example.com' is already taken.",
    }
    assert [e["code"] for e in body[1:]] == [
        "PasswordRequiresNonAlphanumeric",
        "PasswordRequiresDigit",
        "PasswordRequiresUpper",
    ]


@pytest.mark.asyncio
async def test_login_returns_token(api_client):
    registered = await api_client.register(RegisterUserRequest(email="carla@example.com", password=PASSWORD))
    api_client.use_token(None)

    response = await api_client.login(LoginUserRequest(email="carla@example.com", password=PASSWORD))

    assert response.user_token.id == registered.user_token.id
    assert response.access_token != registered.access_token


@pytest.mark.asyncio
async def test_login_without_body(http_client):
    response = await http_client.post("/login")

    assert response.status_code == 400
    assert response.json() == "User not provided"


@pytest.mark.asyncio
async def test_login_validation_errors(api_client):
    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.login(LoginUserRequest(email="", password=PASSWORD))

    assert exc_info.value.response.status_code == 422
    assert list(exc_info.value.response.json()["errors"]) == ["email"]


@pytest.mark.asyncio
async def test_login_wrong_password(api_client):
    await api_client.register(RegisterUserRequest(email="dani@example.com", password=PASSWORD))

    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.login(LoginUserRequest(email="dani@example.com", password="Wr0ng!Pass"))

    error = cast(HTTPStatusError, exc_info.value)
    assert error.response.status_code == 400
    assert error.response.json() == "Invalid user or password"


@pytest.mark.asyncio
async def test_login_unknown_user(api_client):
    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.login(LoginUserRequest(email="nobody@example.com", password=PASSWORD))

    assert exc_info.value.response.status_code == 400
    assert exc_info.value.response.json() == "Invalid user or password"


@pytest.mark.asyncio
async def test_login_locks_out_after_repeated_failures(api_client, test_container):
    max_attempts = test_container.config().lockout.max_failed_access_attempts
    await api_client.register(RegisterUserRequest(email="eva@example.com", password=PASSWORD))
    wrong = LoginUserRequest(email="eva@example.com", password="Wr0ng!Pass")

    messages = []
    for _ in range(max_attempts):
        with pytest.raises(HTTPStatusError) as exc_info:
            await api_client.login(wrong)
        messages.append(exc_info.value.response.json())

    assert messages == ["Invalid user or password"] * (max_attempts - 1) + ["User locked out"]

    # The right password is refused while the lockout lasts
    with pytest.raises(HTTPStatusError) as exc_info:
        await api_client.login(LoginUserRequest(email="eva@example.com", password=PASSWORD))
    assert exc_info.value.response.json() == "User locked out"


@pytest.mark.asyncio
async def test_concurrent_wrong_passwords_lock_the_account(api_client, http_client, test_container):
    """Failures that overlap in time all count toward the lockout."""
    max_attempts = test_container.config().lockout.max_failed_access_attempts
    await api_client.register(RegisterUserRequest(email="gil@example.com", password=PASSWORD))
    wrong = {"email": "gil@example.com", "password": "Wr0ng!Pass"}

    responses = await asyncio.gather(*(
        http_client.post("/login", json=wrong) for _ in range(max_attempts * 2)
    ))

    assert {r.status_code for r in responses} == {400}
    assert "User locked out" in [r.json() for r in responses]

    response = await http_client.post("/login", json={"email": "gil@example.com", "password": PASSWORD})
    assert response.status_code == 400
    assert response.json() == "User locked out"


@pytest.mark.asyncio
async def test_token_carries_claims_and_roles(api_client, identity_service, token_service):
    await api_client.register(RegisterUserRequest(email="fabi@example.com", password=PASSWORD))
    await identity_service.add_claim("fabi@example.com", "ExcluirCliente")
    await identity_service.add_to_role("fabi@example.com", "Admin")

    response = await api_client.login(LoginUserRequest(email="fabi@example.com", password=PASSWORD))

    claims = [(c.type, c.value) for c in response.user_token.claims]
    assert ("ExcluirCliente", "") in claims
    assert ("role", "Admin") in claims

    identity = token_service.decode(response.access_token)
    assert identity.has_claim("ExcluirCliente")
    assert identity.roles == ["Admin"]
