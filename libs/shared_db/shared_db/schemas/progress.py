"""Progress schemas for shared database operations."""

from datetime import datetime

from pydantic import ConfigDict, Field

from common.ids import CourseId, LessonId, ProgressId, UserId
from common.utils.json_model import JsonModel, JsonSnakeCaseModel


class ProgressUpdate(JsonModel):
    course_id: CourseId
    lesson_id: LessonId
    watched_seconds: int = Field(default=0, ge=0)


class ProgressResponse(JsonSnakeCaseModel):
    id: ProgressId
    user_id: UserId
    course_id: CourseId
    lesson_id: LessonId
    watched_seconds: int
    completed: bool
    updated_at: datetime | None = None

    model_config = ConfigDict(from_attributes=True)
