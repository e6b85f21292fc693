from sqlalchemy import Column, Integer, String, DateTime
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
import enum
from api.core.database import Base


class UserRole(str, enum.Enum):
    student = "student"
    lecturer = "lecturer"
    admin = "admin"


class ClassLevel(str, enum.Enum):
    ND1 = "ND1"
    ND2 = "ND2"
    HND1 = "HND1"
    HND2 = "HND2"


class User(Base):
    """One row per person; ``role`` tags which optional columns apply.

    Students carry ``matriculation_number`` and ``class_level``. Lecturers and
    admins leave them empty.
    """
    __tablename__ = "users"

    id = Column(Integer, primary_key=True, index=True)
    auth_subject = Column(String(255), nullable=False, unique=True, index=True)  # Identity gateway `sub`
    email = Column(String(255), nullable=False, index=True)
    role = Column(SAEnum(UserRole, name="user_role"), nullable=False, default=UserRole.student)
    full_name = Column(String(255), nullable=False)
    matriculation_number = Column(String(64), nullable=True)
    class_level = Column(SAEnum(ClassLevel, name="class_level"), nullable=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships
    courses = relationship("Course", back_populates="lecturer")
    enrollments = relationship("Enrollment", back_populates="student", cascade="all, delete-orphan")
    quiz_results = relationship("QuizResult", back_populates="student", cascade="all, delete-orphan")
