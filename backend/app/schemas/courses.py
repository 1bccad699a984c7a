from common.utils.json_model import JsonSnakeCaseModel
from shared_db.schemas.course import CourseResponse
from shared_db.schemas.lesson import LessonResponse


class CourseDetail(JsonSnakeCaseModel):
    course: CourseResponse
    lessons: list[LessonResponse]
