"""Unit tests for ProgressService."""

from __future__ import annotations

from uuid import uuid4

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.progress_service import ProgressService, completion_threshold
from common.core.app_error import AppException, Errors
from common.ids import LessonId, UserId
from shared_db.crud.lesson import LessonDAO
from shared_db.crud.progress import ProgressDAO
from shared_db.models.lesson import Lesson
from shared_db.models.profile import UserRole
from shared_db.schemas.progress import ProgressUpdate

STUDENT_ID = UserId("student-1")
ADMIN_ID = UserId("admin-1")


def _build_service() -> ProgressService:
    return ProgressService(ProgressDAO(), LessonDAO())


async def _add_lesson(db: AsyncSession, course_id, duration_seconds: int | None = 100) -> LessonId:
    lesson = Lesson(course_id=course_id, title="Intro", position=1, duration_seconds=duration_seconds)
    db.add(lesson)
    await db.commit()
    return lesson.id


@pytest.mark.parametrize(("duration", "expected"), [(100, 90), (95, 85), (1, 0), (0, None), (None, None)])
def test_completion_threshold(duration: int | None, expected: int | None) -> None:
    assert completion_threshold(duration) == expected


@pytest.mark.asyncio
async def test_progress_completes_at_threshold_and_never_reverts(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()
    lesson_id = await _add_lesson(db_session, course.id)
    service = _build_service()
    auth = make_auth(STUDENT_ID, UserRole.STUDENT)

    assert await service.update_progress(db_session, auth, ProgressUpdate(course_id=course.id, lesson_id=lesson_id, watched_seconds=30)) is False
    assert await service.update_progress(db_session, auth, ProgressUpdate(course_id=course.id, lesson_id=lesson_id, watched_seconds=90)) is True
    assert await service.update_progress(db_session, auth, ProgressUpdate(course_id=course.id, lesson_id=lesson_id, watched_seconds=10)) is False

    rows = await service.get_progress(db_session, auth, STUDENT_ID, course.id)
    assert len(rows) == 1
    assert rows[0].watched_seconds == 10
    assert rows[0].completed is True


@pytest.mark.asyncio
async def test_lesson_without_duration_never_completes(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()
    lesson_id = await _add_lesson(db_session, course.id, duration_seconds=None)

    completed = await _build_service().update_progress(
        db_session, make_auth(STUDENT_ID, UserRole.STUDENT), ProgressUpdate(course_id=course.id, lesson_id=lesson_id, watched_seconds=5000)
    )

    assert completed is False


@pytest.mark.asyncio
async def test_unknown_lesson_is_invalid_input(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()

    with pytest.raises(AppException) as exc_info:
        await _build_service().update_progress(
            db_session, make_auth(STUDENT_ID, UserRole.STUDENT), ProgressUpdate(course_id=course.id, lesson_id=uuid4(), watched_seconds=5)
        )

    assert Errors.Generic.INVALID_INPUT.is_(exc_info.value)


@pytest.mark.asyncio
async def test_lesson_from_another_course_is_invalid_input(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()
    other = await make_course()
    lesson_id = await _add_lesson(db_session, other.id)

    with pytest.raises(AppException) as exc_info:
        await _build_service().update_progress(
            db_session, make_auth(STUDENT_ID, UserRole.STUDENT), ProgressUpdate(course_id=course.id, lesson_id=lesson_id, watched_seconds=5)
        )

    assert exc_info.value.http_status == 400


@pytest.mark.asyncio
async def test_progress_of_another_user_is_forbidden(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()

    with pytest.raises(AppException) as exc_info:
        await _build_service().get_progress(db_session, make_auth(UserId("student-2"), UserRole.STUDENT), STUDENT_ID, course.id)

    assert Errors.Auth.FORBIDDEN.is_(exc_info.value)


@pytest.mark.asyncio
async def test_admin_can_read_any_progress(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()

    assert await _build_service().get_progress(db_session, make_auth(ADMIN_ID, UserRole.ADMIN), STUDENT_ID, course.id) == []
