"""Unit tests for lesson stream access."""

from __future__ import annotations

from datetime import UTC, datetime
from unittest.mock import AsyncMock, MagicMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.lesson_service import LessonService
from common.core.app_error import AppException, Errors
from common.ids import LessonId, UserId
from shared_db.crud.course import CourseDAO
from shared_db.crud.enrollment import EnrollmentDAO
from shared_db.crud.lesson import LessonDAO
from shared_db.crud.payments import PaymentDAO
from shared_db.models.lesson import Lesson
from shared_db.models.profile import UserRole
from shared_db.schemas.payments import PaymentCreate

INSTRUCTOR_ID = UserId("instructor-1")
STUDENT_ID = UserId("student-1")
ADMIN_ID = UserId("admin-1")


def _build_service() -> tuple[LessonService, MagicMock]:
    storage = MagicMock()
    storage.default_ttl_seconds = 300
    storage.create_signed_url = AsyncMock(return_value="https://signed.example/video.mp4")
    return LessonService(LessonDAO(), CourseDAO(), EnrollmentDAO(), storage), storage


async def _add_lesson(db: AsyncSession, course_id, storage_path: str | None = "courses/1/intro.mp4") -> LessonId:
    lesson = Lesson(course_id=course_id, title="Intro", position=1, duration_seconds=600, storage_path=storage_path)
    db.add(lesson)
    await db.commit()
    return lesson.id


async def _enroll(db: AsyncSession, user_id: UserId, course_id) -> None:
    payment = await PaymentDAO().create(
        db,
        obj_in=PaymentCreate(user_id=user_id, course_id=course_id, provider="razorpay", provider_reference="pay_x", amount=4999, currency="INR"),
    )
    await EnrollmentDAO().upsert_paid(db, user_id=user_id, course_id=course_id, payment_id=payment.id, purchased_at=datetime.now(UTC))
    await db.commit()


@pytest.mark.asyncio
async def test_paid_lesson_requires_enrollment(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course(price_cents=4999)
    lesson_id = await _add_lesson(db_session, course.id)
    service, storage = _build_service()

    with pytest.raises(AppException) as exc_info:
        await service.stream_url(db_session, make_auth(STUDENT_ID, UserRole.STUDENT), lesson_id)

    assert Errors.Lesson.ENROLLMENT_REQUIRED.is_(exc_info.value)
    assert exc_info.value.http_status == 403
    storage.create_signed_url.assert_not_awaited()


@pytest.mark.asyncio
async def test_enrolled_student_gets_signed_url(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course(price_cents=4999)
    lesson_id = await _add_lesson(db_session, course.id)
    await _enroll(db_session, STUDENT_ID, course.id)
    service, storage = _build_service()

    response = await service.stream_url(db_session, make_auth(STUDENT_ID, UserRole.STUDENT), lesson_id)

    assert response.url == "https://signed.example/video.mp4"
    assert response.expires_in == 300
    storage.create_signed_url.assert_awaited_once_with("courses/1/intro.mp4", 300)


@pytest.mark.asyncio
async def test_free_lesson_is_open_to_any_authenticated_user(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course(price_cents=0)
    lesson_id = await _add_lesson(db_session, course.id)
    service, _ = _build_service()

    response = await service.stream_url(db_session, make_auth(STUDENT_ID, None), lesson_id)

    assert response.url.startswith("https://")


@pytest.mark.parametrize(("user_id", "role"), [(INSTRUCTOR_ID, UserRole.INSTRUCTOR), (ADMIN_ID, UserRole.ADMIN)])
@pytest.mark.asyncio
async def test_owner_and_admin_bypass_enrollment(db_session: AsyncSession, make_course, make_auth, user_id: UserId, role: UserRole) -> None:
    course = await make_course(price_cents=4999)
    lesson_id = await _add_lesson(db_session, course.id)
    service, _ = _build_service()

    response = await service.stream_url(db_session, make_auth(user_id, role), lesson_id)

    assert response.expires_in == 300


@pytest.mark.asyncio
async def test_lesson_without_video_is_not_found(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course(price_cents=0)
    lesson_id = await _add_lesson(db_session, course.id, storage_path=None)
    service, _ = _build_service()

    with pytest.raises(AppException) as exc_info:
        await service.stream_url(db_session, make_auth(STUDENT_ID, UserRole.STUDENT), lesson_id)

    assert Errors.Lesson.NOT_FOUND.is_(exc_info.value)
