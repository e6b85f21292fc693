from pydantic import BaseModel, Field
from typing import Optional, List
from datetime import datetime
from api.models.user import ClassLevel
from api.schemas.base import BaseSchema


# Request schemas (no from_attributes needed)
class CourseCreate(BaseModel):
    title: str = Field(min_length=1)
    required_class: ClassLevel


# Response schemas (need from_attributes for ORM)
class CourseFileResponse(BaseSchema):
    id: int
    course_id: int
    file_key: str
    name: str
    url: str
    size: int
    content_type: str
    uploaded_at: Optional[datetime] = None


class CourseResponse(BaseSchema):
    id: int
    title: str
    lecturer_id: Optional[int] = None
    lecturer_name: str
    required_class: ClassLevel
    files: List[CourseFileResponse] = []
    created_at: Optional[datetime] = None
