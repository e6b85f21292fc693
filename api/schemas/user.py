from pydantic import BaseModel, EmailStr, Field
from typing import Annotated, Optional, Union, Literal
from datetime import datetime
from api.models.user import ClassLevel, UserRole
from api.schemas.base import BaseSchema


# Request schemas
class StudentRegistration(BaseModel):
    role: Literal["student"]
    full_name: str = Field(min_length=1)
    matriculation_number: str = Field(min_length=1)
    email: EmailStr
    class_level: ClassLevel


class LecturerRegistration(BaseModel):
    role: Literal["lecturer"]
    full_name: str = Field(min_length=1)
    email: EmailStr


# Self-registration is tagged by role; there is deliberately no admin variant
UserRegistration = Annotated[
    Union[StudentRegistration, LecturerRegistration],
    Field(discriminator="role"),
]


class AdminSetup(BaseModel):
    """Bootstrap payload for the very first admin."""
    full_name: str = Field(min_length=1)
    email: EmailStr


# Response schemas: one shape per role
class UserProfileBase(BaseSchema):
    id: int
    email: str
    full_name: str
    role: UserRole
    created_at: Optional[datetime] = None


class StudentProfile(UserProfileBase):
    matriculation_number: str
    class_level: ClassLevel


class LecturerProfile(UserProfileBase):
    pass


class AdminProfile(UserProfileBase):
    pass


UserProfile = Union[StudentProfile, LecturerProfile, AdminProfile]

PROFILE_BY_ROLE = {
    UserRole.student: StudentProfile,
    UserRole.lecturer: LecturerProfile,
    UserRole.admin: AdminProfile,
}


def to_profile(user) -> UserProfile:
    """Build the role-specific profile for a ``User`` row."""
    return PROFILE_BY_ROLE[user.role].model_validate(user)
