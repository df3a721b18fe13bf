"""Tests for access token handling and principal resolution."""

from datetime import timedelta
from uuid import uuid4

import pytest
from fastapi import HTTPException
from jose import JWTError

from learnpath.auth.dependencies import get_current_principal, get_token_from_header
from learnpath.auth.permissions import UserRole
from learnpath.auth.schemas import Principal, require_principal
from learnpath.auth.security import create_access_token, decode_access_token
from learnpath.config import get_settings
from learnpath.core.exceptions import NotAuthenticatedError


class TestAccessToken:
    """Tests for access token creation and decoding."""

    def test_decode_access_token(self) -> None:
        """Should decode token and return payload."""
        user_id = uuid4()
        token = create_access_token(
            {"sub": str(user_id), "email": "a@test.com", "role": "student"}
        )
        payload = decode_access_token(token)

        assert payload["sub"] == str(user_id)
        assert payload["role"] == "student"
        assert payload["type"] == "access"
        assert "exp" in payload
        assert "iat" in payload

    def test_decode_access_token_expired(self) -> None:
        """Should raise JWTError for expired token."""
        token = create_access_token(
            {"sub": str(uuid4())}, expires_delta=timedelta(seconds=-1)
        )
        with pytest.raises(JWTError):
            decode_access_token(token)

    def test_decode_access_token_invalid(self) -> None:
        with pytest.raises(JWTError):
            decode_access_token("invalid.token.here")

    def test_decode_access_token_wrong_type(self) -> None:
        """Tokens not typed as access are rejected."""
        from jose import jwt

        settings = get_settings()
        token = jwt.encode(
            {"sub": str(uuid4()), "type": "refresh"},
            settings.auth_secret_key,
            algorithm=settings.auth_algorithm,
        )
        with pytest.raises(JWTError):
            decode_access_token(token)


class TestGetTokenFromHeader:
    """Tests for Bearer header parsing."""

    @pytest.mark.parametrize(
        "header,expected",
        [
            ("Bearer abc", "abc"),
            ("bearer abc", "abc"),
            ("Basic abc", None),
            ("Bearer", None),
        ],
    )
    def test_parse(self, header: str, expected: str | None) -> None:
        request = type("R", (), {"headers": {"Authorization": header}})()
        assert get_token_from_header(request) == expected

    def test_missing_header(self) -> None:
        request = type("R", (), {"headers": {}})()
        assert get_token_from_header(request) is None


class TestGetCurrentPrincipal:
    """Tests for principal resolution."""

    @pytest.mark.asyncio
    async def test_no_token_is_anonymous(self) -> None:
        assert await get_current_principal(None) is None

    @pytest.mark.asyncio
    async def test_valid_token(self) -> None:
        user_id = uuid4()
        token = create_access_token({"sub": str(user_id), "role": "instructor"})

        principal = await get_current_principal(token)

        assert principal == Principal(user_id=user_id, role=UserRole.INSTRUCTOR)

    @pytest.mark.asyncio
    async def test_role_defaults_to_student(self) -> None:
        token = create_access_token({"sub": str(uuid4())})
        principal = await get_current_principal(token)
        assert principal.role == UserRole.STUDENT

    @pytest.mark.asyncio
    async def test_unparseable_subject_is_401(self) -> None:
        token = create_access_token({"sub": "not-a-uuid"})
        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal(token)
        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_invalid_token_is_401(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_principal("garbage")
        assert exc_info.value.status_code == 401


def test_require_principal_rejects_anonymous() -> None:
    with pytest.raises(NotAuthenticatedError):
        require_principal(None)
