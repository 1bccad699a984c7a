from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from common.ids import CourseId, LessonId
from shared_db.models.lesson import Lesson
from shared_db.schemas.lesson import LessonResponse


class LessonDAO:
    async def get(self, db: AsyncSession, id: LessonId) -> LessonResponse | None:
        result = await db.execute(select(Lesson).where(Lesson.id == id))
        lesson = result.scalar_one_or_none()
        return LessonResponse.model_validate(lesson) if lesson else None

    async def list_by_course(self, db: AsyncSession, course_id: CourseId) -> list[LessonResponse]:
        """Lessons of a course ordered by position."""
        result = await db.execute(select(Lesson).where(Lesson.course_id == course_id).order_by(Lesson.position.asc(), Lesson.id))
        return [LessonResponse.model_validate(lesson) for lesson in result.scalars().all()]
