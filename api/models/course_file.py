"""Course file model for blob-stored materials."""

from sqlalchemy import Column, Integer, String, DateTime, ForeignKey, BigInteger, UniqueConstraint
from sqlalchemy.orm import relationship
from sqlalchemy.sql import func
from api.core.database import Base


class CourseFile(Base):
    """
    An uploaded material attached to a course.

    Each file is its own row, so adding or removing one never rewrites the
    others. The binary lives in the blob store under ``storage_key``.
    """
    __tablename__ = "course_files"
    __table_args__ = (
        UniqueConstraint("course_id", "file_key", name="uq_course_files_course_key"),
    )

    id = Column(Integer, primary_key=True, index=True)
    course_id = Column(Integer, ForeignKey("courses.id", ondelete="CASCADE"), nullable=False, index=True)

    # Client-visible identifier, e.g. "1712345678901_week1.pdf"
    file_key = Column(String(500), nullable=False)
    name = Column(String(500), nullable=False)  # Display name
    url = Column(String(1000), nullable=False)
    storage_key = Column(String(1000), nullable=False, unique=True)
    size = Column(BigInteger, nullable=False)  # Bytes
    content_type = Column(String(255), nullable=False)
    uploaded_at = Column(DateTime(timezone=True), server_default=func.now())

    course = relationship("Course", back_populates="files")
