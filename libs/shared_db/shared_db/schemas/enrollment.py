"""Pydantic schemas for enrollments."""

from datetime import datetime

from pydantic import ConfigDict

from common.ids import CourseId, EnrollmentId, PaymentId, UserId
from common.utils.json_model import JsonSnakeCaseModel
from shared_db.models.enrollment import EnrollmentStatus


class EnrollmentRecord(JsonSnakeCaseModel):
    id: EnrollmentId
    user_id: UserId
    course_id: CourseId
    status: EnrollmentStatus
    is_paid: bool
    purchased_at: datetime | None = None
    payment_id: PaymentId | None = None

    model_config = ConfigDict(from_attributes=True)
