from sqlalchemy import Column, Integer, String, DateTime, ForeignKey
from sqlalchemy import Enum as SAEnum
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from api.core.database import Base
from api.models.user import ClassLevel


class Course(Base):
    __tablename__ = "courses"

    id = Column(Integer, primary_key=True, index=True)
    title = Column(String(255), nullable=False)
    lecturer_id = Column(Integer, ForeignKey("users.id", ondelete="SET NULL"), nullable=True, index=True)
    lecturer_name = Column(String(255), nullable=False)  # Denormalized for listings
    required_class = Column(SAEnum(ClassLevel, name="class_level"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now())

    # Relationships with cascades to avoid orphan rows
    lecturer = relationship("User", back_populates="courses")
    files = relationship(
        "CourseFile",
        back_populates="course",
        cascade="all, delete-orphan",
        order_by="CourseFile.id",
    )
    enrollments = relationship("Enrollment", back_populates="course", cascade="all, delete-orphan")
    quizzes = relationship("Quiz", back_populates="course", cascade="all, delete-orphan")
