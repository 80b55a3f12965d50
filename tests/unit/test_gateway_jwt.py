"""Unit tests for JWT handler and auth dependencies."""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException
from jose import jwt

from config.settings import settings
from src.th_common.errors import AdminRequiredError, InvalidCredentialsError
from src.th_gateway.auth.dependencies import CurrentUser, get_current_user, require_admin
from src.th_gateway.auth.jwt_handler import create_access_token, decode_token


def _encode(payload: dict, secret: str | None = None) -> str:
    return jwt.encode(payload, secret or settings.JWT_SECRET, algorithm=settings.JWT_ALGORITHM)


def test_access_token_contains_correct_claims() -> None:
    token = create_access_token("user-123", role="admin")
    payload = jwt.get_unverified_claims(token)
    assert payload["sub"] == "user-123"
    assert payload["role"] == "admin"
    assert payload["type"] == "access"


def test_default_role_is_user() -> None:
    payload = decode_token(create_access_token("user-abc"))
    assert payload["role"] == "user"


def test_decode_valid_access_token() -> None:
    payload = decode_token(create_access_token("user-abc"))
    assert payload["sub"] == "user-abc"


def test_expired_token_raises_credentials_error() -> None:
    past = datetime.now(UTC) - timedelta(hours=1)
    token = _encode({"sub": "u", "type": "access", "iat": past, "exp": past + timedelta(minutes=1)})
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_wrong_secret_raises() -> None:
    token = _encode({"sub": "u", "type": "access"}, secret="someone-else")
    with pytest.raises(InvalidCredentialsError):
        decode_token(token)


def test_non_access_token_raises() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(_encode({"sub": "u", "type": "refresh"}))


def test_missing_sub_raises() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token(_encode({"type": "access"}))


def test_garbage_token_raises() -> None:
    with pytest.raises(InvalidCredentialsError):
        decode_token("not-a-jwt")


class TestDependencies:
    @pytest.mark.asyncio
    async def test_get_current_user(self) -> None:
        user = await get_current_user(create_access_token("user-7", role="admin"))
        assert user == CurrentUser(id="user-7", role="admin")
        assert user.is_admin is True

    @pytest.mark.asyncio
    async def test_bad_token_is_http_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user("bogus")
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_require_admin_passes_admin(self) -> None:
        admin = CurrentUser(id="a", role="admin")
        assert await require_admin(admin) is admin

    @pytest.mark.asyncio
    async def test_require_admin_rejects_user(self) -> None:
        with pytest.raises(AdminRequiredError):
            await require_admin(CurrentUser(id="u", role="user"))
