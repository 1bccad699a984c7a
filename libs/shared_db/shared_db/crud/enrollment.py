from datetime import datetime

from sqlalchemy import case, func, select
from sqlalchemy.ext.asyncio import AsyncSession

from common.db.db_utils import dialect_insert
from common.ids import CourseId, PaymentId, UserId
from shared_db.models.enrollment import Enrollment, EnrollmentStatus
from shared_db.schemas.enrollment import EnrollmentRecord


class EnrollmentDAO:
    async def get(self, db: AsyncSession, user_id: UserId, course_id: CourseId) -> EnrollmentRecord | None:
        result = await db.execute(
            select(Enrollment).where(Enrollment.user_id == user_id, Enrollment.course_id == course_id).execution_options(populate_existing=True)
        )
        enrollment = result.scalar_one_or_none()
        return EnrollmentRecord.model_validate(enrollment) if enrollment else None

    async def get_active(self, db: AsyncSession, user_id: UserId, course_id: CourseId) -> EnrollmentRecord | None:
        enrollment = await self.get(db, user_id, course_id)
        return enrollment if enrollment and enrollment.status == EnrollmentStatus.ACTIVE else None

    async def upsert_paid(
        self,
        db: AsyncSession,
        *,
        user_id: UserId,
        course_id: CourseId,
        payment_id: PaymentId,
        purchased_at: datetime,
    ) -> EnrollmentRecord:
        """Activate the (user, course) enrollment as paid.

        Single ``INSERT ... ON CONFLICT DO UPDATE`` keyed on ``(user_id, course_id)``; an enrollment
        that is already paid keeps its original ``purchased_at``.
        """
        stmt = dialect_insert(db, Enrollment).values(
            user_id=user_id,
            course_id=course_id,
            status=EnrollmentStatus.ACTIVE,
            is_paid=True,
            purchased_at=purchased_at,
            payment_id=payment_id,
        )
        stmt = stmt.on_conflict_do_update(
            index_elements=[Enrollment.user_id, Enrollment.course_id],
            set_={
                "status": stmt.excluded.status,
                "purchased_at": case(
                    (Enrollment.is_paid.is_(True), func.coalesce(Enrollment.purchased_at, stmt.excluded.purchased_at)),
                    else_=stmt.excluded.purchased_at,
                ),
                "is_paid": True,
                "payment_id": stmt.excluded.payment_id,
                "updated_at": func.current_timestamp(),
            },
        )
        _ = await db.execute(stmt)

        enrollment = await self.get(db, user_id, course_id)
        assert enrollment is not None
        return enrollment
