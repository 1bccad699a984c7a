from collections.abc import AsyncGenerator, Awaitable, Callable, Iterable
from typing import Annotated

from fastapi import Depends, Header
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from app.service_container import Services
from app.services.course_service import CourseService
from app.services.lesson_service import LessonService
from app.services.payment_intent_service import PaymentIntentService
from app.services.profile_service import ProfileService
from app.services.progress_service import ProgressService
from app.services.quiz_service import QuizService
from app.services.reconciliation_service import ReconciliationService
from app.services.token_verifier import TokenVerifier
from common.core.app_error import Errors
from common.core.request_context import RequestContext
from common.utils.utils import get_logger
from shared_db.db import AsyncSessionLocal
from shared_db.models.profile import UserRole
from shared_db.schemas.auth import AuthContext

logger = get_logger()
services = Services.instance()


def get_request_context() -> RequestContext:
    return RequestContext.get()


async def get_db() -> AsyncGenerator[AsyncSession]:
    """Dependency for async database session."""
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            raise
        finally:
            await session.close()


def get_token_verifier() -> TokenVerifier:
    return services.token_verifier


def get_profile_service() -> ProfileService:
    return services.profile_service


def get_course_service() -> CourseService:
    return services.course_service


def get_lesson_service() -> LessonService:
    return services.lesson_service


def get_quiz_service() -> QuizService:
    return services.quiz_service


def get_progress_service() -> ProgressService:
    return services.progress_service


def get_payment_intent_service() -> PaymentIntentService:
    return services.payment_intent_service


def get_reconciliation_service() -> ReconciliationService:
    return services.reconciliation_service


async def require_authenticated(
    db: Annotated[AsyncSession, Depends(get_db)],
    token_verifier: Annotated[TokenVerifier, Depends(get_token_verifier)],
    profile_service: Annotated[ProfileService, Depends(get_profile_service)],
    authorization: Annotated[str | None, Header()] = None,
) -> AuthContext:
    """Verify the bearer credential and attach the caller's profile (None when no profile row exists)."""
    principal = await token_verifier.verify(authorization)

    try:
        profile = await profile_service.resolve(db, principal.user_id)
    except SQLAlchemyError as e:
        logger.exception("Profile lookup failed during authentication", user_id=principal.user_id)
        raise Errors.Auth.UNAUTHENTICATED.create(message="Authentication failed", cause=e) from e

    auth = AuthContext(principal=principal, profile=profile)
    request_context = RequestContext.get_or_none()
    if request_context is not None:
        request_context.bind_user(principal.user_id, auth.role.value)
    return auth


def require_role(allowed: Iterable[UserRole | str]) -> Callable[..., Awaitable[AuthContext]]:
    """Dependency factory: the caller's stored profile role must be one of ``allowed``.

    Callers without a profile row are rejected regardless of their credential metadata.
    """
    allowed_roles = frozenset(UserRole(role) for role in allowed)

    async def role_checker(auth: Annotated[AuthContext, Depends(require_authenticated)]) -> AuthContext:
        if auth.profile is None or auth.profile.role not in allowed_roles:
            logger.info(
                "Role check failed",
                role=auth.profile.role if auth.profile else None,
                allowed=sorted(allowed_roles),
            )
            raise Errors.Auth.FORBIDDEN.create(message="Insufficient role", details={"allowed": sorted(allowed_roles)})
        return auth

    return role_checker


require_admin = require_role({UserRole.ADMIN})
require_instructor_or_admin = require_role({UserRole.INSTRUCTOR, UserRole.ADMIN})
