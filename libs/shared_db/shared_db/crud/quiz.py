from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from common.ids import CourseId, QuizId
from shared_db.models.quiz import Question, Quiz
from shared_db.schemas.quiz import QuestionKey, QuizResponse


class QuizDAO:
    async def list_by_course(self, db: AsyncSession, course_id: CourseId) -> list[QuizResponse]:
        result = await db.execute(select(Quiz).where(Quiz.course_id == course_id).order_by(Quiz.created_at, Quiz.id))
        return [QuizResponse.model_validate(quiz) for quiz in result.scalars().all()]

    async def get_answer_key(self, db: AsyncSession, quiz_id: QuizId) -> list[QuestionKey]:
        """Correct option and marks of every question in the quiz."""
        result = await db.execute(select(Question).where(Question.quiz_id == quiz_id))
        return [QuestionKey.model_validate(question) for question in result.scalars().all()]
