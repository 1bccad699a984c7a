import math

from sqlalchemy.ext.asyncio import AsyncSession

from common.core.app_error import Errors
from common.ids import CourseId, UserId
from common.utils.utils import get_logger
from shared_db.crud.lesson import LessonDAO
from shared_db.crud.progress import ProgressDAO
from shared_db.schemas.auth import AuthContext, ensure_owner_or_admin
from shared_db.schemas.progress import ProgressResponse, ProgressUpdate

logger = get_logger(__name__)

COMPLETION_RATIO = 0.9


def completion_threshold(duration_seconds: int | None) -> int | None:
    """Watched seconds at which a lesson counts as completed; None for lessons without a duration."""
    if not duration_seconds:
        return None
    return math.floor(duration_seconds * COMPLETION_RATIO)


class ProgressService:
    def __init__(self, progress_dao: ProgressDAO, lesson_dao: LessonDAO) -> None:
        self.progress_dao = progress_dao
        self.lesson_dao = lesson_dao

    async def get_progress(self, db: AsyncSession, auth: AuthContext, user_id: UserId, course_id: CourseId) -> list[ProgressResponse]:
        ensure_owner_or_admin(auth, user_id)
        return await self.progress_dao.list_for_course(db, user_id, course_id)

    async def update_progress(self, db: AsyncSession, auth: AuthContext, update: ProgressUpdate) -> bool:
        """Record watched seconds; returns True when the lesson is (now) completed. Completion never reverts."""
        lesson = await self.lesson_dao.get(db, update.lesson_id)
        if lesson is None or lesson.course_id != update.course_id:
            raise Errors.Generic.INVALID_INPUT.create(message="Unknown lesson for this course")

        await self.progress_dao.upsert(
            db,
            user_id=auth.user_id,
            course_id=update.course_id,
            lesson_id=update.lesson_id,
            watched_seconds=update.watched_seconds,
        )

        threshold = completion_threshold(lesson.duration_seconds)
        completed = threshold is not None and update.watched_seconds >= threshold
        if completed:
            await self.progress_dao.mark_completed(db, user_id=auth.user_id, lesson_id=update.lesson_id)
            logger.info("Lesson completed", lesson_id=update.lesson_id, watched_seconds=update.watched_seconds)
        return completed
