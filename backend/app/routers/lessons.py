"""Lesson listing and video streaming routes."""

from typing import Annotated

from fastapi import APIRouter, Depends
from sqlalchemy.ext.asyncio import AsyncSession

from app.dependencies import get_db, get_lesson_service, require_authenticated
from app.services.lesson_service import LessonService
from common.ids import CourseId, LessonId
from shared_db.schemas.auth import AuthContext
from shared_db.schemas.lesson import LessonResponse, StreamUrlResponse

lessons_router = APIRouter(prefix="/lessons", tags=["lessons"])


@lessons_router.get("/course/{course_id}", response_model=list[LessonResponse])
async def list_lessons(
    course_id: CourseId,
    _auth: Annotated[AuthContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
    lesson_service: Annotated[LessonService, Depends(get_lesson_service)],
):
    return await lesson_service.list_lessons(db, course_id)


@lessons_router.get("/{lesson_id}/stream", response_model=StreamUrlResponse)
async def stream_lesson(
    lesson_id: LessonId,
    auth: Annotated[AuthContext, Depends(require_authenticated)],
    db: Annotated[AsyncSession, Depends(get_db)],
    lesson_service: Annotated[LessonService, Depends(get_lesson_service)],
):
    """Short-lived signed URL for the lesson video."""
    return await lesson_service.stream_url(db, auth, lesson_id)
