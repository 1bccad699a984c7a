import uuid

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from common.ids import CourseId, LessonId
from shared_db.db import Base


class Lesson(Base):
    __tablename__ = "lessons"

    id: Mapped[LessonId] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    course_id: Mapped[CourseId] = mapped_column(Uuid(), ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    duration_seconds: Mapped[int | None] = mapped_column(Integer, nullable=True)
    # Object key inside the lesson video bucket
    storage_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)

    course = relationship("Course", back_populates="lessons")
