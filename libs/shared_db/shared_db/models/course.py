import uuid

from sqlalchemy import Boolean, CheckConstraint, Integer, String, Text, Uuid, false
from sqlalchemy.orm import Mapped, mapped_column, relationship

from common.ids import CourseId, UserId
from shared_db.db import Base


class Course(Base):
    """Catalog entry. ``price_cents`` is the single internal price representation (minor units)."""

    __tablename__ = "courses"
    __table_args__ = (CheckConstraint("price_cents >= 0", name="price_non_negative"),)

    id: Mapped[CourseId] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    title: Mapped[str] = mapped_column(String(255), nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False, default="")
    price_cents: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    instructor_id: Mapped[UserId] = mapped_column(String(128), index=True, nullable=False)
    thumbnail_path: Mapped[str | None] = mapped_column(String(1024), nullable=True)
    is_published: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False, server_default=false())

    lessons = relationship("Lesson", back_populates="course", order_by="Lesson.position")
