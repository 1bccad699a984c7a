# backend/app/routers/__init__.py


from fastapi import APIRouter

from app.schemas.health import HealthCheckResponse
from common.core.config_service import config_service, settings
from common.utils.utils import get_logger

from .auth import auth_router
from .courses import courses_router
from .lessons import lessons_router
from .payments import payments_router
from .progress import progress_router
from .quizzes import quiz_router

logger = get_logger(__name__)

router = APIRouter(prefix=settings.API_PREFIX)


# Health check endpoint
@router.get("/health")
async def health_check() -> HealthCheckResponse:
    """Health check endpoint for monitoring and testing"""
    return HealthCheckResponse(
        status="healthy",
        service="lms-backend",
        environment=config_service.get_environment(),
        use_mock_cognito=config_service.use_mock_cognito(),
        payments_configured=config_service.payments.is_configured(),
        database_type="sqlite" if config_service.get_database_url().startswith("sqlite") else "postgresql",
    )


# Include route definitions
router.include_router(auth_router, prefix="/auth", tags=["authentication"])
router.include_router(courses_router)
router.include_router(lessons_router)
router.include_router(quiz_router)
router.include_router(progress_router)
router.include_router(payments_router)
