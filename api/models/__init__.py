# Import all models here so Base.metadata is complete for Alembic
from api.models.user import User, UserRole, ClassLevel
from api.models.course import Course
from api.models.course_file import CourseFile
from api.models.enrollment import Enrollment
from api.models.quiz import Quiz, QuizResult, QuestionType

__all__ = [
    "User",
    "UserRole",
    "ClassLevel",
    "Course",
    "CourseFile",
    "Enrollment",
    "Quiz",
    "QuizResult",
    "QuestionType",
]
