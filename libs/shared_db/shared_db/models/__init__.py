# shared_db/models/__init__.py
"""Import all models so ``Base.metadata`` knows every table before ``create_all``."""

from shared_db.models.course import Course
from shared_db.models.enrollment import Enrollment, EnrollmentStatus
from shared_db.models.lesson import Lesson
from shared_db.models.payments import Payment, PaymentStatus
from shared_db.models.profile import Profile, UserRole
from shared_db.models.progress import Progress
from shared_db.models.quiz import Question, Quiz

__all__ = [
    "Course",
    "Enrollment",
    "EnrollmentStatus",
    "Lesson",
    "Payment",
    "PaymentStatus",
    "Profile",
    "Progress",
    "Question",
    "Quiz",
    "UserRole",
]
