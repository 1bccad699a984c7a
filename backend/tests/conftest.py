"""Shared fixtures. Environment is pinned before any application module is imported."""

import os

os.environ["APP_ENV"] = "test"
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"
os.environ["USE_MOCK_COGNITO"] = "true"
os.environ["RAZORPAY_KEY_ID"] = "rzp_test_key"
os.environ["RAZORPAY_KEY_SECRET"] = "test_key_secret"
os.environ["RAZORPAY_WEBHOOK_SECRET"] = "test_webhook_secret"
os.environ["STORAGE_BUCKET"] = "lesson-videos"

from collections.abc import AsyncGenerator, Awaitable, Callable  # noqa: E402

import pytest  # noqa: E402
import pytest_asyncio  # noqa: E402
from sqlalchemy.ext.asyncio import AsyncSession  # noqa: E402

import shared_db.models  # noqa: E402, F401
from common.ids import UserId  # noqa: E402
from shared_db.crud.course import CourseDAO  # noqa: E402
from shared_db.db import AsyncSessionLocal, Base, engine  # noqa: E402
from shared_db.models.profile import UserRole  # noqa: E402
from shared_db.schemas.auth import AuthContext, Principal  # noqa: E402
from shared_db.schemas.course import CourseCreate, CourseResponse  # noqa: E402
from shared_db.schemas.profile import ProfileResponse  # noqa: E402

INSTRUCTOR_ID = UserId("instructor-1")


@pytest_asyncio.fixture
async def db_session() -> AsyncGenerator[AsyncSession]:
    """Fresh in-memory schema per test."""
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    async with AsyncSessionLocal() as session:
        yield session

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
    await engine.dispose()


CourseFactory = Callable[..., Awaitable[CourseResponse]]
AuthFactory = Callable[[UserId, UserRole | None], AuthContext]


@pytest.fixture
def make_course(db_session: AsyncSession) -> CourseFactory:
    async def _make(*, price_cents: int = 4999, instructor_id: UserId = INSTRUCTOR_ID, is_published: bool = True) -> CourseResponse:
        dao = CourseDAO()
        course = await dao.create(db_session, obj_in=CourseCreate(title="Async Python", price_cents=price_cents), instructor_id=instructor_id)
        if is_published:
            course = await dao.update(db_session, course.id, {"is_published": True}) or course
        await db_session.commit()
        return course

    return _make


@pytest.fixture
def make_auth() -> AuthFactory:
    """AuthContext as produced by the authorization gate; ``role=None`` means no profile row."""

    def _make(user_id: UserId, role: UserRole | None) -> AuthContext:
        principal = Principal(user_id=user_id, email=f"{user_id}@example.com")
        profile = ProfileResponse(id=user_id, email=principal.email, role=role) if role is not None else None
        return AuthContext(principal=principal, profile=profile)

    return _make
