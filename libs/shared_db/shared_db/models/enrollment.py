import uuid
from datetime import datetime
from enum import StrEnum

from sqlalchemy import Boolean, ForeignKey, String, UniqueConstraint, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column

from common.db.db_utils import DateTimeUTC
from common.ids import CourseId, EnrollmentId, PaymentId, UserId
from shared_db.db import Base
from shared_db.models.enum_utils import str_enum_column


class EnrollmentStatus(StrEnum):
    ACTIVE = "active"


class Enrollment(Base):
    """At most one row per (user, course); only ever written through an upsert on that pair."""

    __tablename__ = "enrollments"
    __table_args__ = (UniqueConstraint("user_id", "course_id", name="uq_enrollments_user_course"),)

    id: Mapped[EnrollmentId] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UserId] = mapped_column(String(128), index=True, nullable=False)
    course_id: Mapped[CourseId] = mapped_column(Uuid(), ForeignKey("courses.id"), index=True, nullable=False)
    status: Mapped[EnrollmentStatus] = mapped_column(str_enum_column(EnrollmentStatus), nullable=False, default=EnrollmentStatus.ACTIVE)
    is_paid: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
    purchased_at: Mapped[datetime | None] = mapped_column(DateTimeUTC(), nullable=True)
    payment_id: Mapped[PaymentId | None] = mapped_column(Uuid(), ForeignKey("payments.id"), nullable=True)
