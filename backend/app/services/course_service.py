from sqlalchemy.ext.asyncio import AsyncSession

from app.schemas.courses import CourseDetail
from common.core.app_error import Errors
from common.ids import CourseId
from common.utils.utils import get_logger
from shared_db.crud.course import CourseDAO
from shared_db.crud.lesson import LessonDAO
from shared_db.schemas.auth import AuthContext, ensure_owner_or_admin
from shared_db.schemas.course import CourseCreate, CoursePatch, CourseResponse

logger = get_logger(__name__)


class CourseService:
    """Catalog reads and instructor-owned course mutations."""

    def __init__(self, course_dao: CourseDAO, lesson_dao: LessonDAO) -> None:
        self.course_dao = course_dao
        self.lesson_dao = lesson_dao

    async def list_courses(self, db: AsyncSession, *, limit: int = 20, offset: int = 0, include_unpublished: bool = False) -> list[CourseResponse]:
        return await self.course_dao.get_multi(db, skip=offset, limit=limit, include_unpublished=include_unpublished)

    async def get_course(self, db: AsyncSession, course_id: CourseId) -> CourseDetail:
        course = await self.course_dao.get(db, course_id)
        if course is None:
            raise Errors.Course.NOT_FOUND.create(details={"courseId": str(course_id)})
        lessons = await self.lesson_dao.list_by_course(db, course_id)
        return CourseDetail(course=course, lessons=lessons)

    async def create_course(self, db: AsyncSession, auth: AuthContext, obj_in: CourseCreate) -> CourseResponse:
        course = await self.course_dao.create(db, obj_in=obj_in, instructor_id=auth.user_id)
        logger.info("Course created", course_id=course.id, price_cents=course.price_cents)
        return course

    async def update_course(self, db: AsyncSession, auth: AuthContext, course_id: CourseId, patch: CoursePatch) -> CourseResponse:
        """Owner or admin only. Fields absent from the request are left unchanged."""
        existing = await self.course_dao.get(db, course_id)
        if existing is None:
            raise Errors.Course.NOT_FOUND.create(details={"courseId": str(course_id)})
        ensure_owner_or_admin(auth, existing.instructor_id, Errors.Course.NOT_OWNER)

        changes = patch.changes()
        if not changes:
            raise Errors.Course.EMPTY_PATCH.create()

        updated = await self.course_dao.update(db, course_id, changes)
        if updated is None:
            raise Errors.Course.NOT_FOUND.create(details={"courseId": str(course_id)})

        logger.info("Course updated", course_id=course_id, fields=sorted(changes))
        return updated
