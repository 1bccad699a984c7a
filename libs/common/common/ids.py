from __future__ import annotations

from typing import NewType
from uuid import UUID

RequestId = NewType("RequestId", UUID)
# Identity provider subject; profiles are keyed by it.
UserId = NewType("UserId", str)
CourseId = NewType("CourseId", UUID)
LessonId = NewType("LessonId", UUID)
QuizId = NewType("QuizId", UUID)
QuestionId = NewType("QuestionId", UUID)
ProgressId = NewType("ProgressId", UUID)
PaymentId = NewType("PaymentId", UUID)
EnrollmentId = NewType("EnrollmentId", UUID)
