from datetime import datetime, timedelta, UTC
from uuid import uuid4

import pytest
from sqlalchemy.exc import IntegrityError

from src.app.core.domain.models import User, UserClaim, UserRole


def make_user(email: str = "ana@example.com") -> User:
    return User(email=email, normalized_email=email.upper(), password_hash="hashed")


@pytest.mark.asyncio
async def test_get_by_normalized_email(user_repository, unit_of_work):
    user = make_user()
    async with unit_of_work:
        unit_of_work.add(user)

    found = await user_repository.get_by_normalized_email("ANA@EXAMPLE.COM")

    assert found is not None
    assert found.id == user.id
    assert found.email == "ana@example.com"
    assert await user_repository.get_by_normalized_email("ana@example.com") is None


@pytest.mark.asyncio
async def test_get_by_id_round_trips_lockout_state(user_repository, unit_of_work):
    lockout_end = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)
    user = make_user()
    user.lockout_end = lockout_end
    user.access_failed_count = 2
    async with unit_of_work:
        unit_of_work.add(user)

    found = await user_repository.get_by_id(user.id)

    assert found is not None
    assert found.lockout_end == lockout_end
    assert found.lockout_end.tzinfo is not None
    assert found.access_failed_count == 2


@pytest.mark.asyncio
async def test_normalized_email_is_unique(unit_of_work):
    async with unit_of_work:
        unit_of_work.add(make_user())

    with pytest.raises(IntegrityError):
        async with unit_of_work:
            unit_of_work.add(make_user())


@pytest.mark.asyncio
async def test_update_user_lockout(user_repository, unit_of_work):
    user = make_user()
    async with unit_of_work:
        unit_of_work.add(user)

    user.lockout_end = datetime.now(UTC) + timedelta(minutes=5)
    async with unit_of_work:
        await unit_of_work.update(user)
        written = await unit_of_work.save_changes()

    assert written == 1
    found = await user_repository.get_by_id(user.id)
    assert found.is_locked_out(datetime.now(UTC))


@pytest.mark.asyncio
async def test_claims_are_listed_in_grant_order(user_claim_repository, unit_of_work):
    user = make_user()
    async with unit_of_work:
        unit_of_work.add(user)
    async with unit_of_work:
        unit_of_work.add(UserClaim(user_id=user.id, claim_type="ExcluirCliente"))
    async with unit_of_work:
        unit_of_work.add(UserClaim(user_id=user.id, claim_type="Department", claim_value="Sales"))

    claims = await user_claim_repository.get_by_user_id(user.id)

    assert [(c.claim_type, c.claim_value) for c in claims] == [
        ("ExcluirCliente", ""),
        ("Department", "Sales"),
    ]
    assert all(c.id is not None for c in claims)


@pytest.mark.asyncio
async def test_roles_are_listed_by_name(user_role_repository, unit_of_work):
    user = make_user()
    other = make_user("bob@example.com")
    async with unit_of_work:
        unit_of_work.add(user)
        unit_of_work.add(other)
    async with unit_of_work:
        unit_of_work.add(UserRole(user_id=user.id, role_name="Support"))
        unit_of_work.add(UserRole(user_id=user.id, role_name="Admin"))
        unit_of_work.add(UserRole(user_id=other.id, role_name="Guest"))

    roles = await user_role_repository.get_by_user_id(user.id)

    assert [r.role_name for r in roles] == ["Admin", "Support"]


@pytest.mark.asyncio
async def test_record_failed_access_counts_then_locks(user_repository, unit_of_work):
    user = make_user()
    user.lockout_enabled = True
    async with unit_of_work:
        unit_of_work.add(user)
    lockout_end = datetime(2030, 1, 1, 12, 0, tzinfo=UTC)

    first = await user_repository.record_failed_access(user.id, 2, lockout_end)
    second = await user_repository.record_failed_access(user.id, 2, lockout_end)

    assert (first.access_failed_count, first.lockout_end) == (1, None)
    assert (second.access_failed_count, second.lockout_end) == (0, lockout_end)
    stored = await user_repository.get_by_id(user.id)
    assert stored.lockout_end == lockout_end


@pytest.mark.asyncio
async def test_record_failed_access_for_missing_user(user_repository):
    assert await user_repository.record_failed_access(uuid4(), 2, datetime.now(UTC)) is None


@pytest.mark.asyncio
async def test_reset_failed_access(user_repository, unit_of_work):
    user = make_user()
    user.access_failed_count = 4
    async with unit_of_work:
        unit_of_work.add(user)

    await user_repository.reset_failed_access(user.id)

    assert (await user_repository.get_by_id(user.id)).access_failed_count == 0
