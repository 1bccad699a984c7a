"""ProfileService against the in-memory identity provider."""

from __future__ import annotations

from unittest.mock import AsyncMock, patch

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.mock_cognito_service import MockCognitoService
from app.services.profile_service import ProfileService
from common.core.app_error import AppException, Errors
from common.core.exceptions import CognitoError
from common.ids import UserId
from shared_db.crud.profile import ProfileDAO
from shared_db.models.profile import UserRole
from shared_db.schemas.auth import LoginRequest, Principal, SignUpRequest


def _build_service() -> ProfileService:
    return ProfileService(ProfileDAO(), MockCognitoService(token_secret="test-secret"))


def _signup(email: str = "Ada@Example.com", role: UserRole = UserRole.STUDENT) -> SignUpRequest:
    return SignUpRequest(full_name="Ada Lovelace", email=email, password="correct-horse", role=role)


@pytest.mark.asyncio
async def test_sign_up_creates_profile_and_logs_in(db_session: AsyncSession) -> None:
    service = _build_service()

    response = await service.sign_up(db_session, _signup(role=UserRole.INSTRUCTOR))

    assert response.access_token
    assert response.user.email == "ada@example.com"
    assert response.user.role == UserRole.INSTRUCTOR

    profile = await service.resolve(db_session, response.user.id)
    assert profile is not None
    assert profile.full_name == "Ada Lovelace"
    assert profile.role == UserRole.INSTRUCTOR


@pytest.mark.asyncio
async def test_duplicate_sign_up_fails(db_session: AsyncSession) -> None:
    service = _build_service()
    await service.sign_up(db_session, _signup())

    with pytest.raises(AppException) as exc_info:
        await service.sign_up(db_session, _signup())

    assert Errors.Auth.SIGNUP_FAILED.is_(exc_info.value)
    assert exc_info.value.http_status == 400


@pytest.mark.asyncio
async def test_login_returns_profile_role(db_session: AsyncSession) -> None:
    service = _build_service()
    created = await service.sign_up(db_session, _signup())
    await service.update_role(db_session, created.user.id, "admin")

    response = await service.login(db_session, LoginRequest(email="ada@example.com", password="correct-horse"))

    # Stored profile role wins over the role carried by the credential
    assert response.user.role == UserRole.ADMIN
    assert response.access_token


@pytest.mark.asyncio
async def test_login_with_wrong_password_fails(db_session: AsyncSession) -> None:
    service = _build_service()
    await service.sign_up(db_session, _signup())

    with pytest.raises(AppException) as exc_info:
        await service.login(db_session, LoginRequest(email="ada@example.com", password="wrong-password"))

    assert Errors.Auth.LOGIN_FAILED.is_(exc_info.value)
    assert exc_info.value.http_status == 401


@pytest.mark.asyncio
async def test_login_with_other_desired_role_is_rejected(db_session: AsyncSession) -> None:
    service = _build_service()
    await service.sign_up(db_session, _signup())

    with pytest.raises(AppException) as exc_info:
        await service.login(db_session, LoginRequest.model_validate({"email": "ada@example.com", "password": "correct-horse", "desiredRole": "instructor"}))

    assert Errors.Auth.ROLE_MISMATCH.is_(exc_info.value)
    assert exc_info.value.details.details == {"actualRole": "student", "desiredRole": "instructor"}


@pytest.mark.asyncio
async def test_update_role_validation(db_session: AsyncSession) -> None:
    service = _build_service()

    with pytest.raises(AppException) as invalid:
        await service.update_role(db_session, UserId("someone"), "superuser")
    with pytest.raises(AppException) as missing:
        await service.update_role(db_session, UserId("someone"), "instructor")

    assert Errors.Auth.INVALID_ROLE.is_(invalid.value)
    assert Errors.Auth.PROFILE_NOT_FOUND.is_(missing.value)


def test_describe_falls_back_to_principal() -> None:
    principal = Principal(user_id=UserId("sub-1"), email="a@example.com", metadata_role="instructor")

    profile = ProfileService.describe(principal, None)

    assert profile.id == "sub-1"
    assert profile.role == UserRole.INSTRUCTOR


def test_describe_ignores_unknown_metadata_role() -> None:
    principal = Principal(user_id=UserId("sub-1"), metadata_role="superuser")

    assert ProfileService.describe(principal, None).role == UserRole.STUDENT


@pytest.mark.parametrize(
    "failure",
    [
        CognitoError("Additional verification is required to sign in.", error_code="NEW_PASSWORD_REQUIRED"),
        Errors.Upstream.TIMEOUT.create(message="cognito timed out"),
        Errors.Upstream.FAILED.create(message="cognito request failed"),
    ],
)
@pytest.mark.asyncio
async def test_sign_up_keeps_profile_when_auto_login_fails(db_session: AsyncSession, failure: Exception) -> None:
    identity_provider = MockCognitoService(token_secret="test-secret")
    service = ProfileService(ProfileDAO(), identity_provider)

    with patch.object(identity_provider, "sign_in", AsyncMock(side_effect=failure)):
        response = await service.sign_up(db_session, _signup())
    await db_session.commit()

    assert response.access_token is None
    profile = await service.resolve(db_session, response.user.id)
    assert profile is not None
    assert profile.email == "ada@example.com"
