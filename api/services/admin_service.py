"""
User profiles and administration.

Profiles are created for an identity the gateway already knows (its ``sub``
claim); role never changes afterwards.
"""
import logging
from typing import List, Optional

from sqlalchemy import func
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from api.core.errors import Conflict, NotFound, UpstreamFailure, ValidationFailed
from api.models.course import Course
from api.models.course_file import CourseFile
from api.models.enrollment import Enrollment
from api.models.quiz import QuizResult
from api.models.user import ClassLevel, User, UserRole
from api.schemas.admin import SystemStats

logger = logging.getLogger(__name__)


def get_user_by_subject(db: Session, auth_subject: str) -> Optional[User]:
    return db.query(User).filter(User.auth_subject == auth_subject).first()


def create_profile(
    db: Session,
    auth_subject: str,
    role: UserRole,
    full_name: str,
    email: str,
    matriculation_number: Optional[str] = None,
    class_level: Optional[ClassLevel] = None,
) -> User:
    """Attach a profile to an identity. One profile per subject."""
    if role == UserRole.student and (not matriculation_number or class_level is None):
        raise ValidationFailed("Students need a matriculation number and class level")

    if get_user_by_subject(db, auth_subject):
        raise Conflict("A profile already exists for this account")

    user = User(
        auth_subject=auth_subject,
        role=role,
        full_name=full_name.strip(),
        email=email,
        matriculation_number=matriculation_number if role == UserRole.student else None,
        class_level=class_level if role == UserRole.student else None,
    )
    try:
        db.add(user)
        db.commit()
    except IntegrityError:
        db.rollback()
        raise Conflict("A profile already exists for this account")
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    db.refresh(user)
    logger.info(f"Created {role.value} profile {user.id} for subject {auth_subject}")
    return user


def setup_first_admin(db: Session, auth_subject: str, full_name: str, email: str) -> User:
    """Bootstrap: only works while no admin exists."""
    if db.query(User).filter(User.role == UserRole.admin).first():
        raise Conflict("An admin account already exists")
    return create_profile(db, auth_subject, UserRole.admin, full_name, email)


def list_users(db: Session, role: UserRole) -> List[User]:
    return db.query(User).filter(User.role == role).order_by(User.full_name, User.id).all()


def list_all_courses(db: Session) -> List[Course]:
    return db.query(Course).order_by(Course.created_at, Course.id).all()


def delete_user(db: Session, user_id: int, acting_admin: User) -> None:
    """Delete a profile. Its enrollments and results go with it; its courses stay, unowned."""
    if user_id == acting_admin.id:
        raise ValidationFailed("Admins cannot delete their own account")

    user = db.query(User).filter(User.id == user_id).first()
    if not user:
        raise NotFound("User not found")

    try:
        db.delete(user)
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        raise UpstreamFailure(f"Database error: {str(e)}")

    logger.info(f"Admin {acting_admin.id} deleted user {user_id}")


def system_stats(db: Session) -> SystemStats:
    courses_with_notes = db.query(func.count(func.distinct(CourseFile.course_id))).scalar() or 0
    return SystemStats(
        total_students=db.query(User).filter(User.role == UserRole.student).count(),
        total_lecturers=db.query(User).filter(User.role == UserRole.lecturer).count(),
        total_courses=db.query(Course).count(),
        courses_with_notes=courses_with_notes,
        total_enrollments=db.query(Enrollment).count(),
        approved_enrollments=db.query(Enrollment).filter(Enrollment.approved.is_(True)).count(),
        total_quiz_attempts=db.query(QuizResult).count(),
    )
