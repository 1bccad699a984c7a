from sqlalchemy import func, select, update
from sqlalchemy.ext.asyncio import AsyncSession

from common.db.db_utils import dialect_insert
from common.ids import CourseId, LessonId, UserId
from shared_db.models.progress import Progress
from shared_db.schemas.progress import ProgressResponse


class ProgressDAO:
    async def list_for_course(self, db: AsyncSession, user_id: UserId, course_id: CourseId) -> list[ProgressResponse]:
        result = await db.execute(select(Progress).where(Progress.user_id == user_id, Progress.course_id == course_id))
        return [ProgressResponse.model_validate(row) for row in result.scalars().all()]

    async def upsert(
        self,
        db: AsyncSession,
        *,
        user_id: UserId,
        course_id: CourseId,
        lesson_id: LessonId,
        watched_seconds: int,
    ) -> None:
        """Record watched seconds for ``(user_id, lesson_id)``. ``completed`` is left untouched on conflict."""
        stmt = dialect_insert(db, Progress).values(
            user_id=user_id,
            course_id=course_id,
            lesson_id=lesson_id,
            watched_seconds=watched_seconds,
            completed=False,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Progress.user_id, Progress.lesson_id],
            set_={
                "course_id": stmt.excluded.course_id,
                "watched_seconds": stmt.excluded.watched_seconds,
                "updated_at": func.current_timestamp(),
            },
        )
        _ = await db.execute(stmt)

    async def mark_completed(self, db: AsyncSession, *, user_id: UserId, lesson_id: LessonId) -> None:
        _ = await db.execute(update(Progress).where(Progress.user_id == user_id, Progress.lesson_id == lesson_id).values(completed=True))
