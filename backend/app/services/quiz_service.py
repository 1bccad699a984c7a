from sqlalchemy.ext.asyncio import AsyncSession

from common.ids import CourseId
from shared_db.crud.quiz import QuizDAO
from shared_db.schemas.quiz import QuestionKey, QuizAnswer, QuizResponse, QuizScore, QuizSubmission


def grade(questions: list[QuestionKey], answers: list[QuizAnswer]) -> QuizScore:
    """Score answers against the key. Answers to unknown questions are skipped; unmarked questions are worth 1."""
    by_id = {str(question.id): question for question in questions}
    score = max_score = 0
    for answer in answers:
        question = by_id.get(str(answer.question_id))
        if question is None:
            continue
        marks = question.marks or 1
        max_score += marks
        if str(answer.selected_option_id) == str(question.correct_option_id):
            score += marks
    return QuizScore(score=score, max_score=max_score)


class QuizService:
    def __init__(self, quiz_dao: QuizDAO) -> None:
        self.quiz_dao = quiz_dao

    async def list_quizzes(self, db: AsyncSession, course_id: CourseId) -> list[QuizResponse]:
        return await self.quiz_dao.list_by_course(db, course_id)

    async def submit(self, db: AsyncSession, submission: QuizSubmission) -> QuizScore:
        questions = await self.quiz_dao.get_answer_key(db, submission.quiz_id)
        return grade(questions, submission.answers)
