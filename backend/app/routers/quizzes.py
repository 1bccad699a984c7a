from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_quiz_service, require_authenticated
from app.services.quiz_service import QuizService
from common.ids import CourseId
from shared_db.schemas.auth import AuthContext
from shared_db.schemas.quiz import QuizResponse, QuizScore, QuizSubmission

quiz_router = APIRouter(prefix="/quiz", tags=["quizzes"])


@quiz_router.post("/submit", response_model=QuizScore)
async def submit_quiz(
    submission: QuizSubmission,
    _auth: Annotated[AuthContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
    quiz_service: Annotated[QuizService, Depends(get_quiz_service)],
):
    return await quiz_service.submit(db, submission)


@quiz_router.get("/{course_id}", response_model=list[QuizResponse])
async def list_quizzes(
    course_id: CourseId,
    _auth: Annotated[AuthContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
    quiz_service: Annotated[QuizService, Depends(get_quiz_service)],
):
    return await quiz_service.list_quizzes(db, course_id)
