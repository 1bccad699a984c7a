from sqlalchemy.ext.asyncio import AsyncSession

from app.services.storage_service import StorageService
from common.core.app_error import Errors
from common.ids import CourseId, LessonId
from common.utils.utils import get_logger
from shared_db.crud.course import CourseDAO
from shared_db.crud.enrollment import EnrollmentDAO
from shared_db.crud.lesson import LessonDAO
from shared_db.schemas.auth import AuthContext
from shared_db.schemas.lesson import LessonResponse, StreamUrlResponse

logger = get_logger(__name__)


class LessonService:
    def __init__(self, lesson_dao: LessonDAO, course_dao: CourseDAO, enrollment_dao: EnrollmentDAO, storage: StorageService) -> None:
        self.lesson_dao = lesson_dao
        self.course_dao = course_dao
        self.enrollment_dao = enrollment_dao
        self.storage = storage

    async def list_lessons(self, db: AsyncSession, course_id: CourseId) -> list[LessonResponse]:
        return await self.lesson_dao.list_by_course(db, course_id)

    async def stream_url(self, db: AsyncSession, auth: AuthContext, lesson_id: LessonId) -> StreamUrlResponse:
        """Signed video URL for a lesson the caller may watch.

        Free courses are open to any authenticated user; paid ones need an active enrollment,
        course ownership or the admin role.
        """
        lesson = await self.lesson_dao.get(db, lesson_id)
        if lesson is None or not lesson.storage_path:
            raise Errors.Lesson.NOT_FOUND.create(details={"lessonId": str(lesson_id)})

        course = await self.course_dao.get(db, lesson.course_id)
        if course is None:
            raise Errors.Lesson.NOT_FOUND.create(details={"lessonId": str(lesson_id)})

        allowed = course.is_free or auth.is_admin or course.instructor_id == auth.user_id
        if not allowed:
            allowed = await self.enrollment_dao.get_active(db, auth.user_id, course.id) is not None
        if not allowed:
            logger.info("Lesson stream denied", lesson_id=lesson_id, course_id=course.id)
            raise Errors.Lesson.ENROLLMENT_REQUIRED.create(details={"courseId": str(course.id)})

        ttl = self.storage.default_ttl_seconds
        url = await self.storage.create_signed_url(lesson.storage_path, ttl)
        return StreamUrlResponse(url=url, expires_in=ttl)
