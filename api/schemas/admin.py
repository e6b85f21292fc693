from pydantic import BaseModel, EmailStr, Field
from api.models.user import ClassLevel


class StudentCreateByAdmin(BaseModel):
    """Admins attach a profile to an identity that already exists upstream."""
    auth_subject: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    matriculation_number: str = Field(min_length=1)
    email: EmailStr
    class_level: ClassLevel


class LecturerCreateByAdmin(BaseModel):
    auth_subject: str = Field(min_length=1)
    full_name: str = Field(min_length=1)
    email: EmailStr


class SystemStats(BaseModel):
    total_students: int
    total_lecturers: int
    total_courses: int
    courses_with_notes: int
    total_enrollments: int
    approved_enrollments: int
    total_quiz_attempts: int
