import uuid

from sqlalchemy import Boolean, ForeignKey, Integer, String, UniqueConstraint, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column

from common.ids import CourseId, LessonId, ProgressId, UserId
from shared_db.db import Base


class Progress(Base):
    __tablename__ = "progress"
    __table_args__ = (UniqueConstraint("user_id", "lesson_id", name="uq_progress_user_lesson"),)

    id: Mapped[ProgressId] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    user_id: Mapped[UserId] = mapped_column(String(128), index=True, nullable=False)
    course_id: Mapped[CourseId] = mapped_column(Uuid(), ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    lesson_id: Mapped[LessonId] = mapped_column(Uuid(), ForeignKey("lessons.id", ondelete="CASCADE"), nullable=False)
    watched_seconds: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    completed: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())
