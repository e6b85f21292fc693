from pydantic import BaseModel
from typing import Optional, List, Literal
from datetime import datetime
from api.schemas.base import BaseSchema
from api.schemas.course import CourseResponse

EnrollmentState = Literal["none", "pending", "enrolled"]


class EnrollmentCreate(BaseModel):
    course_id: int


class EnrollmentResponse(BaseSchema):
    id: int
    student_id: int
    course_id: int
    approved: bool
    enrolled_at: Optional[datetime] = None


class EnrollmentStatusResponse(BaseModel):
    state: EnrollmentState
    enrollment: Optional[EnrollmentResponse] = None


class PendingEnrollment(EnrollmentResponse):
    student_name: str
    course_name: str


class CourseStudent(EnrollmentResponse):
    student_name: str
    student_email: str


class StudentEnrollment(EnrollmentResponse):
    course: CourseResponse


class PendingEnrollmentList(BaseModel):
    items: List[PendingEnrollment]
    skipped: int = 0


class CourseStudentList(BaseModel):
    items: List[CourseStudent]
    skipped: int = 0
