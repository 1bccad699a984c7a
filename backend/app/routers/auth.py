"""Authentication router for signup, login, profile and role management."""

from typing import Annotated

from fastapi import APIRouter, Depends, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_profile_service, require_admin, require_authenticated
from app.services.profile_service import ProfileService
from common.ids import UserId
from shared_db.schemas.auth import AuthContext, AuthResponse, LoginRequest, RoleUpdateRequest, SignUpRequest
from shared_db.schemas.profile import ProfileResponse

auth_router = APIRouter()


@auth_router.post("/signup", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def sign_up(
    request: SignUpRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    """Create the account, store its profile and log it in."""
    return await profile_service.sign_up(db, request)


@auth_router.post("/login", response_model=AuthResponse)
async def login(
    request: LoginRequest,
    db: Annotated[AsyncSession, Depends(get_db)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    return await profile_service.login(db, request)


@auth_router.get("/profile", response_model=ProfileResponse)
async def get_profile(auth: Annotated[AuthContext, Depends(require_authenticated)]):
    return ProfileService.describe(auth.principal, auth.profile)


@auth_router.patch("/role/{uid}", response_model=ProfileResponse)
async def update_role(
    uid: str,
    request: RoleUpdateRequest,
    _admin: Annotated[AuthContext, Depends(require_admin)],
    db: Annotated[AsyncSession, Depends(get_db)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
):
    return await profile_service.update_role(db, UserId(uid), request.role)
