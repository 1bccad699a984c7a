"""Profile resolution and the account operations built on it (signup, login, role changes)."""

from sqlalchemy.ext.asyncio import AsyncSession

from app.services.service_factory import IdentityProvider
from common.core.app_error import AppException, Errors
from common.core.exceptions import CognitoError
from common.ids import UserId
from common.utils.utils import get_logger
from shared_db.crud.profile import ProfileDAO
from shared_db.models.profile import UserRole
from shared_db.schemas.auth import AuthResponse, AuthUser, LoginRequest, Principal, SignUpRequest, effective_role
from shared_db.schemas.profile import ProfileResponse, ProfileUpsert

logger = get_logger(__name__)


class ProfileService:
    def __init__(self, profile_dao: ProfileDAO, identity_provider: IdentityProvider) -> None:
        self.profile_dao = profile_dao
        self.identity_provider = identity_provider

    async def resolve(self, db: AsyncSession, principal_id: UserId) -> ProfileResponse | None:
        """Lookup only; a missing profile is never created here."""
        return await self.profile_dao.get(db, principal_id)

    async def sign_up(self, db: AsyncSession, request: SignUpRequest) -> AuthResponse:
        email = request.email.lower()
        try:
            created = await self.identity_provider.sign_up(email, request.password, full_name=request.full_name, role=request.role.value)
        except CognitoError as e:
            raise Errors.Auth.SIGNUP_FAILED.create(message=e.message, details={"errorCode": e.error_code}, cause=e) from e

        user_id = UserId(created["user_sub"])
        profile = await self.profile_dao.upsert(
            db,
            ProfileUpsert(id=user_id, email=email, full_name=request.full_name, role=request.role),
        )

        access_token: str | None = None
        try:
            tokens = await self.identity_provider.sign_in(email, request.password)
            access_token = tokens["access_token"]
        except CognitoError as e:
            logger.warning("Auto-login after signup failed", user_id=user_id, error_code=e.error_code)
        except AppException as e:
            if not AppException.is_any_of(e, Errors.Upstream.TIMEOUT, Errors.Upstream.FAILED):
                raise
            logger.warning("Auto-login after signup failed", user_id=user_id, error_code=e.details.code)

        logger.info("User signed up", user_id=user_id, role=profile.role)
        return AuthResponse(
            user=AuthUser(id=user_id, email=profile.email, full_name=profile.full_name, role=profile.role),
            access_token=access_token,
        )

    async def login(self, db: AsyncSession, request: LoginRequest) -> AuthResponse:
        email = request.email.lower()
        try:
            tokens = await self.identity_provider.sign_in(email, request.password)
            user_info = await self.identity_provider.get_user_info(tokens["access_token"])
        except CognitoError as e:
            raise Errors.Auth.LOGIN_FAILED.create(message=e.message, cause=e) from e

        user_id = UserId(str(user_info["user_sub"]))
        profile = await self.profile_dao.get(db, user_id)
        actual_role = effective_role(profile, user_info.get("role"))

        if request.desired_role is not None and request.desired_role != actual_role:
            raise Errors.Auth.ROLE_MISMATCH.create(
                message=f"This email is registered as '{actual_role}', not '{request.desired_role}'.",
                details={"actualRole": actual_role.value, "desiredRole": request.desired_role.value},
            )

        return AuthResponse(
            user=AuthUser(
                id=user_id,
                email=user_info.get("email") or email,
                full_name=profile.full_name if profile else None,
                role=actual_role,
            ),
            access_token=tokens["access_token"],
        )

    @staticmethod
    def describe(principal: Principal, profile: ProfileResponse | None) -> ProfileResponse:
        """The stored profile, or one derived from the verified principal when no row exists."""
        if profile is not None:
            return profile
        return ProfileResponse(id=principal.user_id, email=principal.email, role=effective_role(None, principal.metadata_role))

    async def update_role(self, db: AsyncSession, user_id: UserId, role: str) -> ProfileResponse:
        if role not in UserRole:
            raise Errors.Auth.INVALID_ROLE.create(details={"role": role})

        profile = await self.profile_dao.update_role(db, user_id, UserRole(role))
        if profile is None:
            raise Errors.Auth.PROFILE_NOT_FOUND.create(details={"userId": user_id})

        logger.info("Profile role updated", target_user_id=user_id, role=role)
        return profile
