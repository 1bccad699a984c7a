import uuid
from typing import Any

from sqlalchemy import ForeignKey, Integer, String, Text, Uuid
from sqlalchemy.orm import Mapped, mapped_column, relationship

from common.db.db_utils import JsonB
from common.ids import CourseId, QuestionId, QuizId
from shared_db.db import Base


class Quiz(Base):
    __tablename__ = "quizzes"

    id: Mapped[QuizId] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    course_id: Mapped[CourseId] = mapped_column(Uuid(), ForeignKey("courses.id", ondelete="CASCADE"), index=True, nullable=False)
    title: Mapped[str] = mapped_column(String(255), nullable=False)

    questions = relationship("Question", back_populates="quiz")


class Question(Base):
    __tablename__ = "questions"

    id: Mapped[QuestionId] = mapped_column(Uuid(), primary_key=True, default=uuid.uuid4)
    quiz_id: Mapped[QuizId] = mapped_column(Uuid(), ForeignKey("quizzes.id", ondelete="CASCADE"), index=True, nullable=False)
    prompt: Mapped[str] = mapped_column(Text, nullable=False)
    # [{"id": "a", "text": "..."}, ...]
    options: Mapped[list[dict[str, Any]]] = mapped_column(JsonB, nullable=False, default=list)
    correct_option_id: Mapped[str] = mapped_column(String(64), nullable=False)
    marks: Mapped[int | None] = mapped_column(Integer, nullable=True)

    quiz = relationship("Quiz", back_populates="questions")
