"""Lesson schemas for shared database operations."""

from datetime import datetime

from pydantic import ConfigDict

from common.ids import CourseId, LessonId
from common.utils.json_model import JsonSnakeCaseModel


class LessonResponse(JsonSnakeCaseModel):
    id: LessonId
    course_id: CourseId
    title: str
    description: str | None = None
    position: int
    duration_seconds: int | None = None
    storage_path: str | None = None
    created_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)


class StreamUrlResponse(JsonSnakeCaseModel):
    url: str
    expires_in: int
