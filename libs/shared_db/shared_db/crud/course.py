from typing import Any

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from common.ids import CourseId, UserId
from shared_db.models.course import Course
from shared_db.schemas.course import CourseCreate, CourseResponse


class CourseDAO:
    """Data Access Object for Course operations."""

    async def get(self, db: AsyncSession, id: CourseId) -> CourseResponse | None:
        result = await db.execute(select(Course).where(Course.id == id))
        course = result.scalar_one_or_none()
        return CourseResponse.model_validate(course) if course else None

    async def get_multi(
        self,
        db: AsyncSession,
        *,
        skip: int = 0,
        limit: int = 20,
        include_unpublished: bool = False,
    ) -> list[CourseResponse]:
        """Newest first; published courses only unless ``include_unpublished``."""
        query = select(Course)
        if not include_unpublished:
            query = query.where(Course.is_published.is_(True))
        query = query.order_by(Course.created_at.desc(), Course.id).offset(skip).limit(limit)
        result = await db.execute(query)
        return [CourseResponse.model_validate(course) for course in result.scalars().all()]

    async def create(self, db: AsyncSession, *, obj_in: CourseCreate, instructor_id: UserId) -> CourseResponse:
        course = Course(
            title=obj_in.title,
            description=obj_in.description,
            price_cents=obj_in.price_cents,
            thumbnail_path=obj_in.thumbnail_path,
            instructor_id=instructor_id,
            is_published=False,
        )
        db.add(course)
        await db.flush()
        await db.refresh(course)
        return CourseResponse.model_validate(course)

    async def update(self, db: AsyncSession, id: CourseId, changes: dict[str, Any]) -> CourseResponse | None:
        result = await db.execute(select(Course).where(Course.id == id))
        course = result.scalar_one_or_none()
        if course is None:
            return None

        for field, value in changes.items():
            setattr(course, field, value)

        await db.flush()
        await db.refresh(course)
        return CourseResponse.model_validate(course)
