"""
Enrollment workflow.

A student requests to join a course (``approved=False``); the lecturer who
owns the course approves it (``approved=True``). There is no reject or
withdraw state. Listings that join in student or course details tolerate
per-row lookup failures and report how many rows they dropped.
"""
import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from api.core.errors import Forbidden, NotFound, PartialResult, UpstreamFailure, ValidationFailed
from api.models.course import Course
from api.models.enrollment import Enrollment
from api.models.user import User, UserRole
from api.schemas.course import CourseResponse
from api.schemas.enrollment import CourseStudent, EnrollmentState, PendingEnrollment, StudentEnrollment
from api.services.course_registry import can_manage

logger = logging.getLogger(__name__)

UNKNOWN_STUDENT = "Unknown Student"
UNKNOWN_EMAIL = "unknown@email.com"


def _load_student(db: Session, student_id: int) -> Optional[User]:
    return db.query(User).filter(User.id == student_id).first()


def _load_course(db: Session, course_id: int) -> Optional[Course]:
    return db.query(Course).filter(Course.id == course_id).first()


def check_status(db: Session, student_id: int, course_id: int) -> Optional[Enrollment]:
    """Return the student's enrollment for the course, or None."""
    return db.query(Enrollment).filter(
        Enrollment.student_id == student_id,
        Enrollment.course_id == course_id,
    ).first()


def enrollment_state(enrollment: Optional[Enrollment]) -> EnrollmentState:
    if enrollment is None:
        return "none"
    return "enrolled" if enrollment.approved else "pending"


def has_access(db: Session, student_id: int, course_id: int) -> bool:
    """True once the student's enrollment for the course has been approved."""
    return enrollment_state(check_status(db, student_id, course_id)) == "enrolled"


def ensure_course_access(db: Session, course: Course, user: User) -> None:
    """Owners and admins always get in; students need an approved enrollment."""
    if can_manage(course, user):
        return
    if user.role == UserRole.student and has_access(db, user.id, course.id):
        return
    raise Forbidden("You must be enrolled in this course")


def request_enrollment(db: Session, student_id: int, course_id: int) -> Enrollment:
    """
    Ask to join a course.

    Repeating the request returns the existing enrollment untouched; the
    (student, course) unique constraint settles concurrent duplicates.
    """
    student = _load_student(db, student_id)
    if not student:
        raise NotFound("Student not found")
    if student.role != UserRole.student:
        raise ValidationFailed("Only students can request enrollment")

    if not _load_course(db, course_id):
        raise NotFound("Course not found")

    existing = check_status(db, student_id, course_id)
    if existing:
        return existing

    enrollment = Enrollment(student_id=student_id, course_id=course_id, approved=False)
    try:
        db.add(enrollment)
        db.commit()
    except IntegrityError:
        db.rollback()
        existing = check_status(db, student_id, course_id)
        if existing:
            return existing
        raise UpstreamFailure("Could not record enrollment request")
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    db.refresh(enrollment)
    logger.info(f"Enrollment requested: student {student_id} -> course {course_id}")
    return enrollment


def approve(db: Session, enrollment_id: int, approver: User) -> Enrollment:
    """Approve an enrollment. Only the course's lecturer (or an admin) may do this."""
    enrollment = db.query(Enrollment).filter(Enrollment.id == enrollment_id).first()
    if not enrollment:
        raise NotFound("Enrollment not found")

    course = _load_course(db, enrollment.course_id)
    if approver.role != UserRole.admin and (course is None or course.lecturer_id != approver.id):
        raise Forbidden("You can only approve enrollments for your own courses")

    if enrollment.approved:
        return enrollment

    try:
        enrollment.approved = True
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    db.refresh(enrollment)
    logger.info(f"Enrollment {enrollment_id} approved by user {approver.id}")
    return enrollment


def list_pending_for_lecturer(db: Session, lecturer_id: int) -> PartialResult[PendingEnrollment]:
    """Unapproved requests across all of the lecturer's courses."""
    result: PartialResult[PendingEnrollment] = PartialResult()
    courses = db.query(Course).filter(Course.lecturer_id == lecturer_id).order_by(Course.id).all()

    for course in courses:
        try:
            pending = db.query(Enrollment).filter(
                Enrollment.course_id == course.id,
                Enrollment.approved.is_(False),
            ).order_by(Enrollment.id).all()
        except SQLAlchemyError as e:
            logger.error(f"Error fetching enrollments for course {course.id}: {e}")
            result.skipped += 1
            continue

        for enrollment in pending:
            try:
                student = _load_student(db, enrollment.student_id)
            except SQLAlchemyError as e:
                logger.error(f"Error processing enrollment {enrollment.id}: {e}")
                result.skipped += 1
                continue

            result.items.append(PendingEnrollment(
                id=enrollment.id,
                student_id=enrollment.student_id,
                course_id=enrollment.course_id,
                approved=enrollment.approved,
                enrolled_at=enrollment.enrolled_at,
                student_name=student.full_name if student else UNKNOWN_STUDENT,
                course_name=course.title,
            ))

    return result


def list_approved_for_course(db: Session, course_id: int) -> PartialResult[CourseStudent]:
    """Students with access to a course, with their display fields."""
    result: PartialResult[CourseStudent] = PartialResult()
    approved = db.query(Enrollment).filter(
        Enrollment.course_id == course_id,
        Enrollment.approved.is_(True),
    ).order_by(Enrollment.id).all()

    for enrollment in approved:
        try:
            student = _load_student(db, enrollment.student_id)
        except SQLAlchemyError as e:
            logger.error(f"Error processing student enrollment {enrollment.id}: {e}")
            result.skipped += 1
            continue

        result.items.append(CourseStudent(
            id=enrollment.id,
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            approved=enrollment.approved,
            enrolled_at=enrollment.enrolled_at,
            student_name=student.full_name if student else UNKNOWN_STUDENT,
            student_email=student.email if student else UNKNOWN_EMAIL,
        ))

    return result


def list_for_student(db: Session, student_id: int) -> PartialResult[StudentEnrollment]:
    """The student's enrollments with their courses; vanished courses are left out."""
    result: PartialResult[StudentEnrollment] = PartialResult()
    enrollments = db.query(Enrollment).filter(
        Enrollment.student_id == student_id
    ).order_by(Enrollment.id).all()

    for enrollment in enrollments:
        try:
            course = _load_course(db, enrollment.course_id)
        except SQLAlchemyError as e:
            logger.error(f"Error processing enrollment {enrollment.id}: {e}")
            result.skipped += 1
            continue
        if not course:
            continue

        result.items.append(StudentEnrollment(
            id=enrollment.id,
            student_id=enrollment.student_id,
            course_id=enrollment.course_id,
            approved=enrollment.approved,
            enrolled_at=enrollment.enrolled_at,
            course=CourseResponse.model_validate(course),
        ))

    return result
