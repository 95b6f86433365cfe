"""Registration, login and the user-store lookups."""

import pytest

from tasktracker.core.jwt import TokenCodec
from tasktracker.core.permissions import Roles
from tasktracker.errors import AuthenticationFailed, Conflict, ValidationError
from tasktracker.schemas.user import LoginRequest, RegisterRequest
from tasktracker.services.auth_service import AuthService

pytestmark = pytest.mark.db


def register_request(**overrides):
    data = {
        "email": "dana@example.com",
        "display_name": "Dana",
        "password": "secret123",
        "confirm_password": "secret123",
    }
    data.update(overrides)
    return RegisterRequest(**data)


@pytest.mark.asyncio
async def test_register_issues_user_token(db):
    response = await AuthService(db).register(register_request())
    assert response.display_name == "Dana"
    assert response.email == "dana@example.com"
    assert response.token_type == "bearer"
    assert response.expires_in == 3600

    identity = TokenCodec().decode(response.access_token)
    assert identity.roles == frozenset({Roles.USER})
    assert identity.display_name == "Dana"


@pytest.mark.asyncio
async def test_register_rejects_mismatched_passwords(db):
    with pytest.raises(ValidationError) as exc_info:
        await AuthService(db).register(register_request(confirm_password="different1"))
    assert exc_info.value.field == "confirm_password"


@pytest.mark.asyncio
async def test_register_rejects_short_password(db):
    with pytest.raises(ValidationError) as exc_info:
        await AuthService(db).register(register_request(password="abc", confirm_password="abc"))
    assert exc_info.value.field == "password"


@pytest.mark.asyncio
async def test_register_rejects_duplicates(db):
    service = AuthService(db)
    await service.register(register_request())

    with pytest.raises(Conflict) as exc_info:
        await service.register(register_request(email="other@example.com"))
    assert exc_info.value.field == "display_name"

    with pytest.raises(Conflict) as exc_info:
        await service.register(register_request(display_name="Someone", email="DANA@example.com"))
    assert exc_info.value.field == "email"


@pytest.mark.asyncio
async def test_login_round_trip(db):
    service = AuthService(db)
    await service.register(register_request())

    response = await service.login(LoginRequest(email="Dana@Example.com", password="secret123"))
    assert TokenCodec().decode(response.access_token).email == "dana@example.com"

    with pytest.raises(AuthenticationFailed):
        await service.login(LoginRequest(email="dana@example.com", password="wrong-pass"))
    with pytest.raises(AuthenticationFailed):
        await service.login(LoginRequest(email="nobody@example.com", password="secret123"))


@pytest.mark.asyncio
async def test_user_store_lookups(db):
    service = AuthService(db)
    await service.register(register_request())

    identity = await service.find_by_email("dana@example.com")
    assert identity is not None
    assert await service.verify_password(identity, "secret123") is True
    assert await service.verify_password(identity, "nope") is False
    assert await service.roles_of(identity) == frozenset({Roles.USER})
    assert await service.find_by_email("missing@example.com") is None


@pytest.mark.asyncio
async def test_ensure_admin_is_idempotent(db):
    service = AuthService(db)
    first = await service.ensure_admin(email="root@example.com", password="rootpass", display_name="Root")
    second = await service.ensure_admin(email="root@example.com", password="rootpass", display_name="Root")
    assert first.id == second.id
    assert second.role_names == frozenset({Roles.ADMIN})

    response = await service.login(LoginRequest(email="root@example.com", password="rootpass"))
    assert TokenCodec().decode(response.access_token).roles == frozenset({Roles.ADMIN})
