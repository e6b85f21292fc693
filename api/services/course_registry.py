"""
Course and course-file registry.

Courses are discovered by class level. Materials are ``CourseFile`` rows,
one per upload, whose bytes live in the blob store.
"""
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from api.core.errors import Conflict, Forbidden, NotFound, UpstreamFailure, ValidationFailed
from api.models.course import Course
from api.models.course_file import CourseFile
from api.models.user import ClassLevel, User, UserRole

logger = logging.getLogger(__name__)


@dataclass
class StoredFile:
    """A blob that has already been written and now needs registering."""
    file_key: str
    name: str
    url: str
    storage_key: str
    size: int
    content_type: str


def can_manage(course: Course, user: User) -> bool:
    return user.role == UserRole.admin or course.lecturer_id == user.id


def ensure_owner(course: Course, user: User) -> None:
    if not can_manage(course, user):
        raise Forbidden("You can only manage your own courses")


def create_course(
    db: Session,
    title: str,
    lecturer_id: int,
    required_class: ClassLevel,
    lecturer_name: Optional[str] = None,
) -> Course:
    """Create a course owned by a lecturer (or admin)."""
    if not title or not title.strip():
        raise ValidationFailed("Course title is required")

    lecturer = db.query(User).filter(User.id == lecturer_id).first()
    if not lecturer:
        raise NotFound("Lecturer not found")
    if lecturer.role not in (UserRole.lecturer, UserRole.admin):
        raise Forbidden("Only lecturers can create courses")

    course = Course(
        title=title.strip(),
        lecturer_id=lecturer.id,
        lecturer_name=lecturer_name or lecturer.full_name,
        required_class=required_class,
    )
    try:
        db.add(course)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    db.refresh(course)
    logger.info(f"Created course {course.id} '{course.title}' for {course.required_class.value}")
    return course


def list_courses_for_lecturer(db: Session, lecturer_id: int) -> List[Course]:
    return db.query(Course).filter(Course.lecturer_id == lecturer_id).order_by(Course.created_at, Course.id).all()


def list_available_for_class(db: Session, class_level: ClassLevel) -> List[Course]:
    """Courses a student of ``class_level`` can see. Exact match, no hierarchy."""
    return db.query(Course).filter(Course.required_class == class_level).order_by(Course.id).all()


def get_course(db: Session, course_id: int) -> Course:
    course = db.query(Course).filter(Course.id == course_id).first()
    if not course:
        raise NotFound("Course not found")
    return course


def find_file(db: Session, course_id: int, file_key: str) -> Optional[CourseFile]:
    return db.query(CourseFile).filter(
        CourseFile.course_id == course_id,
        CourseFile.file_key == file_key,
    ).first()


def get_file(db: Session, course_id: int, file_key: str) -> CourseFile:
    course_file = find_file(db, course_id, file_key)
    if not course_file:
        raise NotFound("File not found")
    return course_file


def add_file(db: Session, course_id: int, stored: StoredFile, caller: User) -> CourseFile:
    """
    Register an uploaded blob against a course.

    Inserts a single row; the course's other files are never rewritten.
    """
    course = get_course(db, course_id)
    ensure_owner(course, caller)

    course_file = CourseFile(
        course_id=course.id,
        file_key=stored.file_key,
        name=stored.name,
        url=stored.url,
        storage_key=stored.storage_key,
        size=stored.size,
        content_type=stored.content_type,
    )
    try:
        db.add(course_file)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict(f"A file named {stored.file_key} already exists for this course")
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    db.refresh(course_file)
    logger.info(f"Added file {stored.file_key} to course {course_id}")
    return course_file


def remove_file(db: Session, course_id: int, file_key: str, caller: User, blob_store) -> Tuple[CourseFile, Optional[str]]:
    """
    Remove a material: blob first, then the row.

    A blob that is already gone still lets the row be deleted. Any other blob
    failure leaves the row in place so the removal can be retried.

    Returns:
        Tuple of (removed_file, blob_message)
    """
    course = get_course(db, course_id)
    ensure_owner(course, caller)
    course_file = get_file(db, course_id, file_key)

    success, message = blob_store.delete_file(course_file.storage_key)
    if not success:
        logger.error(f"Keeping file {file_key} on course {course_id}: blob delete failed: {message}")
        raise UpstreamFailure(message or "Failed to delete file from storage")

    try:
        db.delete(course_file)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    logger.info(f"Removed file {file_key} from course {course_id}")
    return course_file, message


def delete_course(db: Session, course_id: int, blob_store=None) -> None:
    """Delete a course with its files, enrollments, quizzes and results."""
    course = get_course(db, course_id)
    storage_keys = [f.storage_key for f in course.files]

    try:
        db.delete(course)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    logger.info(f"Deleted course {course_id} with {len(storage_keys)} files")

    # Orphaned blobs are logged rather than failing a delete that already happened
    if blob_store is not None and blob_store.is_enabled():
        for key in storage_keys:
            success, message = blob_store.delete_file(key)
            if not success:
                logger.warning(f"Orphaned blob {key} after deleting course {course_id}: {message}")
