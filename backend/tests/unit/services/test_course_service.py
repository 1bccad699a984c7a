"""Unit tests for CourseService."""

from __future__ import annotations

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from app.services.course_service import CourseService
from common.core.app_error import AppException, Errors
from common.ids import UserId
from shared_db.crud.course import CourseDAO
from shared_db.crud.lesson import LessonDAO
from shared_db.models.lesson import Lesson
from shared_db.models.profile import UserRole
from shared_db.schemas.course import CourseCreate, CoursePatch, coerce_price_cents

INSTRUCTOR_ID = UserId("instructor-1")
ADMIN_ID = UserId("admin-1")


def _build_service() -> CourseService:
    return CourseService(CourseDAO(), LessonDAO())


@pytest.mark.parametrize(
    ("raw", "expected"),
    [(4999, 4999), ("4999", 4999), (49.6, 50), (-10, 0), (None, 0), ("abc", 0), (True, 0), (float("nan"), 0)],
)
def test_price_coercion(raw: object, expected: int) -> None:
    assert coerce_price_cents(raw) == expected


def test_patch_only_reports_sent_fields() -> None:
    patch = CoursePatch.model_validate({"price_cents": "12.4", "unknown": "ignored"})

    assert patch.changes() == {"price_cents": 12}


@pytest.mark.asyncio
async def test_create_course_is_owned_by_caller_and_unpublished(db_session: AsyncSession, make_auth) -> None:
    course = await _build_service().create_course(
        db_session, make_auth(INSTRUCTOR_ID, UserRole.INSTRUCTOR), CourseCreate.model_validate({"title": "SQL", "price_cents": -5})
    )

    assert course.instructor_id == INSTRUCTOR_ID
    assert course.price_cents == 0
    assert course.is_published is False


@pytest.mark.asyncio
async def test_owner_can_patch_course(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course(price_cents=4999)

    updated = await _build_service().update_course(
        db_session, make_auth(INSTRUCTOR_ID, UserRole.INSTRUCTOR), course.id, CoursePatch(title="Renamed")
    )

    assert updated.title == "Renamed"
    assert updated.price_cents == 4999


@pytest.mark.asyncio
async def test_admin_can_patch_any_course(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()

    updated = await _build_service().update_course(db_session, make_auth(ADMIN_ID, UserRole.ADMIN), course.id, CoursePatch(is_published=False))

    assert updated.is_published is False


@pytest.mark.asyncio
async def test_other_instructor_cannot_patch(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()

    with pytest.raises(AppException) as exc_info:
        await _build_service().update_course(db_session, make_auth("instructor-2", UserRole.INSTRUCTOR), course.id, CoursePatch(title="x"))

    assert Errors.Course.NOT_OWNER.is_(exc_info.value)
    assert exc_info.value.http_status == 403


@pytest.mark.asyncio
async def test_empty_patch_is_rejected(db_session: AsyncSession, make_course, make_auth) -> None:
    course = await make_course()

    with pytest.raises(AppException) as exc_info:
        await _build_service().update_course(db_session, make_auth(INSTRUCTOR_ID, UserRole.INSTRUCTOR), course.id, CoursePatch())

    assert Errors.Course.EMPTY_PATCH.is_(exc_info.value)


@pytest.mark.asyncio
async def test_list_hides_unpublished_courses(db_session: AsyncSession, make_course) -> None:
    published = await make_course()
    draft = await make_course(is_published=False)
    service = _build_service()

    public_ids = {course.id for course in await service.list_courses(db_session)}
    all_ids = {course.id for course in await service.list_courses(db_session, include_unpublished=True)}

    assert public_ids == {published.id}
    assert all_ids == {published.id, draft.id}


@pytest.mark.asyncio
async def test_course_detail_lists_lessons_in_order(db_session: AsyncSession, make_course) -> None:
    course = await make_course()
    db_session.add_all(
        [
            Lesson(course_id=course.id, title="Second", position=2),
            Lesson(course_id=course.id, title="First", position=1),
        ]
    )
    await db_session.commit()

    detail = await _build_service().get_course(db_session, course.id)

    assert detail.course.id == course.id
    assert [lesson.title for lesson in detail.lessons] == ["First", "Second"]
