"""Quiz schemas. Questions are read-only through this API; correct answers never leave the server."""

from typing import Any

from pydantic import ConfigDict

from common.ids import CourseId, QuestionId, QuizId
from common.utils.json_model import JsonModel, JsonSnakeCaseModel


class QuizResponse(JsonSnakeCaseModel):
    id: QuizId
    course_id: CourseId
    title: str

    model_config = ConfigDict(from_attributes=True)


class QuestionKey(JsonSnakeCaseModel):
    """Grading view of a question."""

    id: QuestionId
    correct_option_id: str
    marks: int | None = None

    model_config = ConfigDict(from_attributes=True)


class QuizAnswer(JsonModel):
    question_id: str
    selected_option_id: Any = None


class QuizSubmission(JsonModel):
    quiz_id: QuizId
    answers: list[QuizAnswer]


class QuizScore(JsonModel):
    score: int
    max_score: int
