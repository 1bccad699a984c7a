# shared_db/crud/__init__.py

from .course import CourseDAO
from .enrollment import EnrollmentDAO
from .lesson import LessonDAO
from .payments import PaymentDAO
from .profile import ProfileDAO
from .progress import ProgressDAO
from .quiz import QuizDAO

__all__ = ["CourseDAO", "EnrollmentDAO", "LessonDAO", "PaymentDAO", "ProfileDAO", "ProgressDAO", "QuizDAO"]
