"""Authentication schemas for API requests and responses."""

from pydantic import BaseModel, EmailStr, Field

from common.core.app_error import ErrorConfig, Errors
from common.ids import UserId
from common.utils.json_model import JsonModel, JsonSnakeCaseModel
from shared_db.models.profile import UserRole
from shared_db.schemas.profile import ProfileResponse


class SignUpRequest(BaseModel):
    """Request schema for user sign up"""

    full_name: str = Field(..., min_length=1, max_length=255)
    email: EmailStr
    password: str = Field(..., min_length=8, max_length=128)
    role: UserRole = UserRole.STUDENT


class LoginRequest(JsonModel):
    """Request schema for user login. ``desiredRole`` makes login fail when the account has another role."""

    email: EmailStr
    password: str
    desired_role: UserRole | None = None


class RoleUpdateRequest(BaseModel):
    # Plain string so an unknown role is reported as a 400, not a validation error
    role: str


class AuthUser(JsonSnakeCaseModel):
    id: UserId
    email: str | None = None
    full_name: str | None = None
    role: UserRole


class AuthResponse(JsonSnakeCaseModel):
    """Signup/login response; ``access_token`` is null when auto-login after signup failed."""

    user: AuthUser
    access_token: str | None = None


class Principal(JsonSnakeCaseModel):
    """Identity verified by the identity provider."""

    user_id: UserId
    email: str | None = None
    username: str | None = None
    # Role carried in credential metadata (``custom:role``); fallback only
    metadata_role: str | None = None


class AuthContext(BaseModel):
    principal: Principal
    profile: ProfileResponse | None = None

    @property
    def user_id(self) -> UserId:
        return self.principal.user_id

    @property
    def role(self) -> UserRole:
        return effective_role(self.profile, self.principal.metadata_role)

    @property
    def is_admin(self) -> bool:
        return self.profile is not None and self.profile.role == UserRole.ADMIN


def effective_role(profile: ProfileResponse | None, metadata_role: str | None) -> UserRole:
    """Profile row role, then credential metadata role, then student."""
    if profile is not None:
        return profile.role
    if metadata_role in UserRole:
        return UserRole(metadata_role)
    return UserRole.STUDENT


def ensure_owner_or_admin(auth: AuthContext, owner_id: UserId, error: ErrorConfig = Errors.Auth.FORBIDDEN) -> None:
    """Raise ``error`` unless the caller owns the resource or has the admin role."""
    if auth.is_admin or auth.user_id == owner_id:
        return
    raise error.create(details={"ownerId": owner_id})
